# /clinic/services/notifications.py
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from clinic.models.system_models import SmtpSettings
from clinic.services.email_templates import render


@dataclass(frozen=True)
class SmtpTransport:
    """Connection details for one SMTP server. Replaced wholesale, never mutated."""
    host: str
    port: int
    username: str
    password: str
    from_email: str
    use_tls: bool = True
    timeout: int = 10
    revision: Optional[int] = None

    @classmethod
    def from_settings(cls, settings, timeout=10):
        password = settings.get_password()
        if password is None:
            return None
        return cls(
            host=settings.host,
            port=settings.port,
            username=settings.username,
            password=password,
            from_email=settings.from_email,
            use_tls=settings.use_tls,
            timeout=timeout,
            revision=settings.revision,
        )

    def send(self, recipient, message):
        if self.port == 465:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                server.login(self.username, self.password)
                server.sendmail(self.from_email, recipient, message.as_string())
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls(context=ssl.create_default_context())
            server.login(self.username, self.password)
            server.sendmail(self.from_email, recipient, message.as_string())


class EmailDispatcher:
    """
    Renders notification templates and delivers them through the configured SMTP server.

    One dispatcher lives on each application, in ``app.extensions['email_dispatcher']``.
    Delivery is best-effort: ``notify`` reports success as a bool and never raises
    for transport problems.
    """
    def __init__(self, app=None):
        self.transport: Optional[SmtpTransport] = None
        self.outbox = []
        self.suppress = False
        self.timeout = 10
        if app:
            self.init_app(app)

    def init_app(self, app):
        self.suppress = app.config.get('MAIL_SUPPRESS_SEND', False)
        self.timeout = app.config.get('MAIL_TIMEOUT', 10)
        app.extensions['email_dispatcher'] = self

    def reconfigure(self, settings=None):
        """Rebuilds the transport from the stored SMTP settings. Returns the new transport or None."""
        try:
            if settings is None:
                settings = SmtpSettings.current()
            transport = SmtpTransport.from_settings(settings, self.timeout) if settings else None
        except Exception as e:
            current_app.logger.error(f"Error setting up mail transport: {e}")
            transport = None

        self.transport = transport
        return transport

    def current_transport(self) -> Optional[SmtpTransport]:
        """The transport matching the stored settings, rebuilt when another process saved newer ones."""
        try:
            settings = SmtpSettings.current()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Could not read SMTP settings, keeping the current transport: {e}")
            return self.transport

        if settings is None:
            self.transport = None
            return None
        if self.transport is None or self.transport.revision != settings.revision:
            current_app.logger.info(f"Loading SMTP settings revision {settings.revision}")
            return self.reconfigure(settings)
        return self.transport

    def notify(self, template: str, data: dict, to: Optional[str] = None) -> bool:
        subject, text, html = render(template, data)

        transport = self.current_transport()
        if transport is None:
            current_app.logger.error(f"Mail transport is not configured. Dropping '{template}' notification.")
            return False

        recipient = to or transport.from_email
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = transport.from_email
        message["To"] = recipient
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        if self.suppress:
            self.outbox.append({'template': template, 'to': recipient, 'subject': subject, 'message': message})
            return True

        try:
            transport.send(recipient, message)
        except Exception as e:
            current_app.logger.error(f"Failed to send '{template}' email to {recipient}: {e}")
            return False

        current_app.logger.info(f"Successfully sent '{template}' email to {recipient}")
        return True


def get_dispatcher() -> EmailDispatcher:
    return current_app.extensions['email_dispatcher']
