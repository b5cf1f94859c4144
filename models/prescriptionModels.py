from core.extensions import db
from core.imports import datetime


class Prescription(db.Model):
    __tablename__ = "prescriptions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    doctor_name = db.Column(db.String(200), nullable=False)
    doctor_license = db.Column(db.String(100), nullable=False)
    prescription_date = db.Column(db.DateTime, nullable=False)
    image_url = db.Column(db.String(500), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending, verified, rejected
    verified_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    verification_notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("Users", foreign_keys=[user_id], backref="prescriptions")
    verifier = db.relationship("Users", foreign_keys=[verified_by])

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "doctor_name": self.doctor_name,
            "doctor_license": self.doctor_license,
            "prescription_date": self.prescription_date.isoformat(),
            "image_url": self.image_url,
            "status": self.status,
            "verified_by": self.verified_by,
            "verification_notes": self.verification_notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
