# /clinic/models/system_models.py
from clinic.extensions import db
from clinic.utils.dates import utcnow, isoformat
from clinic.utils.encryption_util import encryptor


class AuditLog(db.Model):
    """Who did what to which resource, and whether it succeeded."""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
    action = db.Column(db.String(100), nullable=False)
    resource = db.Column(db.String(100))
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    success = db.Column(db.Boolean, default=True)
    details = db.Column(db.Text)


class RevokedToken(db.Model):
    """Track revoked JWT tokens"""
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(120), unique=True, nullable=False, index=True)
    revoked_at = db.Column(db.DateTime, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)


class SmtpSettings(db.Model):
    """Singleton row holding the outbound mail configuration."""
    __tablename__ = 'smtp_settings'

    id = db.Column(db.Integer, primary_key=True)
    host = db.Column(db.String(255), nullable=False)
    port = db.Column(db.Integer, nullable=False, default=587)
    username = db.Column(db.String(255), nullable=False)
    password = db.Column(db.String(1024), nullable=False)  # Encrypted
    from_email = db.Column(db.String(255), nullable=False)
    use_tls = db.Column(db.Boolean, nullable=False, default=True)
    # Bumped on every save; dispatchers in other processes compare against it
    revision = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {'version_id_col': revision}

    @classmethod
    def current(cls):
        return cls.query.order_by(cls.id).first()

    def set_password(self, password: str) -> None:
        self.password = encryptor.encrypt(password)

    def get_password(self) -> str | None:
        return encryptor.decrypt(self.password)

    def to_dict(self):
        """The password never leaves the server; only whether one is stored."""
        return {
            'id': self.id,
            'host': self.host,
            'port': self.port,
            'username': self.username,
            'fromEmail': self.from_email,
            'useTls': self.use_tls,
            'hasPassword': bool(self.password),
            'updatedAt': isoformat(self.updated_at),
        }
