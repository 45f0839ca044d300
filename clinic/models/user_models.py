import enum
import secrets
from datetime import timedelta

from clinic.extensions import db, bcrypt
from clinic.utils.dates import utcnow, isoformat


class Role(str, enum.Enum):
    """Closed set of account roles."""
    ADMIN = 'admin'
    SUBADMIN = 'subadmin'
    USER = 'user'


# Role sets used by the authorization gate
ADMIN_ONLY = frozenset({Role.ADMIN})
STAFF = frozenset({Role.ADMIN, Role.SUBADMIN})

role_enum = db.Enum(Role, name='user_role', values_callable=lambda roles: [r.value for r in roles])


class User(db.Model):
    """Portal account. Every per-user entity points back here."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(role_enum, nullable=False, default=Role.USER)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    last_login = db.Column(db.DateTime)

    # --- Relationships ---
    medical_records = db.relationship('MedicalRecord', back_populates='user', lazy='dynamic', cascade='all, delete-orphan')
    appointments = db.relationship('Appointment', back_populates='user', lazy='dynamic', cascade='all, delete-orphan')
    medications = db.relationship('Medication', back_populates='user', lazy='dynamic', cascade='all, delete-orphan')
    emergency_contacts = db.relationship('EmergencyContact', back_populates='user', lazy='dynamic', cascade='all, delete-orphan')
    patient_profile = db.relationship('PatientProfile', back_populates='user', uselist=False, cascade='all, delete-orphan')

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF

    def set_password(self, password: str) -> None:
        """Hashes and sets the user's password."""
        if not self._validate_password_strength(password):
            raise ValueError("Password must be at least 8 characters long")
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password: str) -> bool:
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        """Serializes the User object to a dictionary for API responses."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role.value,
            'isActive': self.is_active,
            'lastLogin': isoformat(self.last_login),
            'createdAt': isoformat(self.created_at),
        }

    @staticmethod
    def _validate_password_strength(password: str) -> bool:
        return isinstance(password, str) and len(password) >= 8


class Invitation(db.Model):
    """Single-use, time-limited token granting account creation with a preset role."""
    __tablename__ = 'invitations'

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)
    role = db.Column(role_enum, nullable=False, default=Role.USER)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utcnow)

    created_by = db.relationship('User')

    @classmethod
    def issue(cls, email, role, created_by, expiry_days):
        return cls(
            token=secrets.token_hex(32),
            email=email,
            role=role,
            expires_at=utcnow() + timedelta(days=expiry_days),
            created_by=created_by,
        )

    @classmethod
    def find_valid(cls, token):
        """Returns the invitation for ``token`` if it exists and has not expired."""
        if not token:
            return None
        return cls.query.filter(cls.token == token, cls.expires_at > utcnow()).first()

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role.value,
            'token': self.token,
            'expiresAt': isoformat(self.expires_at),
            'createdById': self.created_by_id,
            'createdAt': isoformat(self.created_at),
        }
