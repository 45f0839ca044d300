from clinic.extensions import db
from clinic.utils.dates import utcnow, isoformat


class EmergencyContact(db.Model):
    """A person to reach on the user's behalf. At most one per user is the main contact."""
    __tablename__ = 'emergency_contacts'
    __table_args__ = (
        # One main contact per user
        db.Index(
            'uq_emergency_contacts_main_per_user', 'user_id',
            unique=True,
            sqlite_where=db.text('is_main_contact = 1'),
            postgresql_where=db.text('is_main_contact'),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    relationship = db.Column(db.String(100), nullable=False)
    phone_number = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip_code = db.Column(db.String(20))
    is_main_contact = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='emergency_contacts')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'relationship': self.relationship,
            'phoneNumber': self.phone_number,
            'email': self.email,
            'city': self.city,
            'state': self.state,
            'zipCode': self.zip_code,
            'isMainContact': self.is_main_contact,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
