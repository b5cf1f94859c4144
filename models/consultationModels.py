from core.extensions import db
from core.imports import datetime


class Consultation(db.Model):
    __tablename__ = "consultations"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    pharmacist_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    subject = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    response = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending, in_progress, completed
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("Users", foreign_keys=[user_id], backref="consultations")
    pharmacist = db.relationship("Users", foreign_keys=[pharmacist_id])

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "pharmacist_id": self.pharmacist_id,
            "subject": self.subject,
            "message": self.message,
            "response": self.response,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
