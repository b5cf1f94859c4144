from core.imports import current_app
from core.extensions import db
from core.errors import NotFound, ValidationFailed
from models.consultationModels import Consultation
from models.userModel import Users

ASSIGNABLE_ROLES = ("pharmacist", "admin")


def create_consultation(user_id, subject, message):
    if not subject or not message:
        raise ValidationFailed("subject and message are required")

    if db.session.get(Users, user_id) is None:
        raise NotFound("User not found")

    consultation = Consultation(
        user_id=user_id,
        subject=subject,
        message=message,
        status="pending"
    )
    db.session.add(consultation)
    db.session.commit()
    current_app.logger.info("Consultation %s opened by user %s", consultation.id, user_id)
    return consultation


def get_user_consultations(user_id):
    return (
        Consultation.query
        .filter_by(user_id=user_id)
        .order_by(Consultation.created_at.desc(), Consultation.id.desc())
        .all()
    )


def get_pending_consultations():
    return (
        Consultation.query
        .filter_by(status="pending")
        .order_by(Consultation.created_at, Consultation.id)
        .all()
    )


def assign_consultation(consultation_id, pharmacist_id):
    consultation = db.session.get(Consultation, consultation_id)
    if consultation is None:
        raise NotFound("Consultation not found")

    assignee = db.session.get(Users, pharmacist_id) if pharmacist_id is not None else None
    if assignee is None or assignee.role not in ASSIGNABLE_ROLES:
        raise ValidationFailed(f"User with ID {pharmacist_id} is not a pharmacist")

    consultation.pharmacist_id = pharmacist_id
    consultation.status = "in_progress"
    db.session.commit()
    current_app.logger.info("Consultation %s assigned to pharmacist %s", consultation.id, pharmacist_id)
    return consultation


def respond_to_consultation(consultation_id, pharmacist_id, response):
    if not response:
        raise ValidationFailed("response is required")

    # only the assigned pharmacist may answer
    consultation = Consultation.query.filter_by(
        id=consultation_id,
        pharmacist_id=pharmacist_id
    ).first()
    if not consultation:
        raise NotFound("Consultation not found or not assigned to this pharmacist")

    consultation.response = response
    consultation.status = "completed"
    db.session.commit()
    current_app.logger.info("Consultation %s answered by pharmacist %s", consultation.id, pharmacist_id)
    return consultation
