from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error
from clinic.api.schemas import SmtpSettingsIn, load_payload
from clinic.extensions import db
from clinic.models.system_models import SmtpSettings
from clinic.services.notifications import get_dispatcher


def get_smtp_settings():
    settings = SmtpSettings.current()
    return jsonify(settings.to_dict() if settings else None), 200


def update_smtp_settings():
    """Saves the outbound mail settings and swaps the dispatcher onto them.

    An update that leaves the password empty keeps the stored one; the first
    save must include it.
    """
    data = load_payload(SmtpSettingsIn)

    settings = SmtpSettings.current()
    if settings is None:
        if not data.password:
            return jsonify({'error': 'Password is required for initial SMTP setup'}), 400
        settings = SmtpSettings()
        db.session.add(settings)

    settings.host = data.host
    settings.port = data.port
    settings.username = data.username
    settings.from_email = data.from_email
    settings.use_tls = data.use_tls
    if data.password:
        settings.set_password(data.password)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'save SMTP settings')

    if get_dispatcher().reconfigure(settings) is None:
        current_app.logger.warning("SMTP settings saved but the mail transport could not be built.")

    return jsonify({'message': 'SMTP settings updated successfully', 'settings': settings.to_dict()}), 200
