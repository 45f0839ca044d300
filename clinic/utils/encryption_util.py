# /clinic/utils/encryption_util.py
import json

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app


class Encryptor:
    """Fernet wrapper keyed from ``ENCRYPTION_KEY``.

    Encrypts stored secrets (the SMTP password) and medical record exports.
    Failed decryption is logged and reported as ``None``, never raised.
    """
    def __init__(self, app=None):
        self._fernet = None
        if app:
            self.init_app(app)

    def init_app(self, app):
        key = app.config.get('ENCRYPTION_KEY')
        if not key:
            raise ValueError("ENCRYPTION_KEY must be configured")
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @property
    def fernet(self) -> Fernet:
        if self._fernet is None:
            raise RuntimeError("Encryptor used before init_app()")
        return self._fernet

    def encrypt(self, value: str) -> str:
        return self.fernet.encrypt(str(value).encode('utf-8')).decode('utf-8')

    def decrypt(self, token: str) -> str | None:
        if not token:
            return None
        try:
            return self.fernet.decrypt(token.encode('utf-8')).decode('utf-8')
        except InvalidToken:
            current_app.logger.warning("Rejected a ciphertext that does not match the configured key")
            return None

    def encrypt_json(self, payload) -> str:
        return self.encrypt(json.dumps(payload, default=str))

    def decrypt_json(self, token: str):
        """Returns the decoded payload, or None for a foreign, tampered or non-JSON token."""
        plaintext = self.decrypt(token)
        if plaintext is None:
            return None
        try:
            return json.loads(plaintext)
        except ValueError:
            current_app.logger.warning("Decrypted payload is not JSON")
            return None


encryptor = Encryptor()
