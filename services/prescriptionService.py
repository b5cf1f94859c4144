from core.imports import current_app, cloudinary
from core.extensions import db
from core.errors import NotFound, ValidationFailed, UploadFailed
from models.prescriptionModels import Prescription
from models.userModel import Users

PRESCRIPTION_STATUSES = ("pending", "verified", "rejected")
REVIEW_STATUSES = ("verified", "rejected")
ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "pdf"}


def allowed_file(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def upload_prescription(user_id, doctor_name, doctor_license, prescription_date, image_url):
    if not all([doctor_name, doctor_license, prescription_date, image_url]):
        raise ValidationFailed("doctor_name, doctor_license, prescription_date and image_url are required")

    if db.session.get(Users, user_id) is None:
        raise NotFound("User not found")

    prescription = Prescription(
        user_id=user_id,
        doctor_name=doctor_name,
        doctor_license=doctor_license,
        prescription_date=prescription_date,
        image_url=image_url,
        status="pending",
    )
    db.session.add(prescription)
    db.session.commit()
    current_app.logger.info("User %s uploaded prescription %s", user_id, prescription.id)
    return prescription


def upload_prescription_image(file_storage, user_id):
    """Push a scanned prescription to Cloudinary and return its secure URL."""
    if file_storage is None or not file_storage.filename:
        raise ValidationFailed("No prescription image selected")
    if not allowed_file(file_storage.filename):
        raise ValidationFailed("File type not allowed")
    if not current_app.config.get("CLOUDINARY_CLOUD_NAME"):
        raise UploadFailed("Image storage is not configured")

    try:
        result = cloudinary.uploader.upload(
            file_storage,
            folder="prescriptions",
            resource_type="auto",
            tags=[f"user_{user_id}"],
        )
    except Exception as e:
        current_app.logger.exception("Prescription image upload failed for user %s", user_id)
        raise UploadFailed(f"Upload failed: {e}") from e

    url = result.get("secure_url")
    if not url:
        raise UploadFailed("Upload failed: no URL returned")
    return url


def get_user_prescriptions(user_id):
    return (
        Prescription.query
        .filter_by(user_id=user_id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .all()
    )


def get_pending_prescriptions():
    return (
        Prescription.query
        .filter_by(status="pending")
        .order_by(Prescription.created_at, Prescription.id)
        .all()
    )


def verify_prescription(prescription_id, verifier_id, status, notes=None):
    # Re-reviewing an already reviewed prescription overwrites the earlier decision.
    if status not in REVIEW_STATUSES:
        raise ValidationFailed(f"Status must be one of: {', '.join(REVIEW_STATUSES)}")

    prescription = db.session.get(Prescription, prescription_id)
    if prescription is None:
        raise NotFound("Prescription not found")

    prescription.status = status
    prescription.verified_by = verifier_id
    prescription.verification_notes = notes
    db.session.commit()

    current_app.logger.info("Prescription %s marked %s by user %s", prescription.id, status, verifier_id)
    return prescription
