from clinic.extensions import db
from clinic.utils.dates import utcnow, isoformat


class PatientProfile(db.Model):
    """Model for storing a patient's communication preferences."""
    __tablename__ = 'patient_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)

    contact_channel = db.Column(db.String(20), nullable=False, default='email')
    reminders = db.Column(db.JSON, nullable=False, default=dict)    # e.g. {"appointments": true}
    preferences = db.Column(db.JSON, nullable=False, default=dict)  # free-form

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='patient_profile')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'contactChannel': self.contact_channel,
            'reminders': self.reminders or {},
            'preferences': self.preferences or {},
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
