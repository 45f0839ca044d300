from flask import current_app, jsonify
from flask_jwt_extended import current_user
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error, find_owned, not_found
from clinic.api.schemas import EmergencyContactIn, EmergencyContactUpdate, load_payload
from clinic.extensions import db
from clinic.models.emergency_contact_models import EmergencyContact
from clinic.services.notifications import get_dispatcher
from clinic.utils.dates import isoformat, utcnow


def _make_main(contact):
    """Clears every main flag of the contact's owner, then sets this one.

    The caller commits, so both statements land in the same transaction.
    """
    EmergencyContact.query.filter_by(user_id=contact.user_id).update({'is_main_contact': False}, synchronize_session='evaluate')
    contact.is_main_contact = True


def get_contacts():
    contacts = (EmergencyContact.query.filter_by(user_id=current_user.id)
                .order_by(EmergencyContact.is_main_contact.desc(), EmergencyContact.created_at)
                .all())
    return jsonify([c.to_dict() for c in contacts]), 200


def create_contact():
    data = load_payload(EmergencyContactIn)

    limit = current_app.config['MAX_EMERGENCY_CONTACTS']
    if current_user.emergency_contacts.count() >= limit:
        return jsonify({'error': f'Maximum of {limit} emergency contacts allowed'}), 400

    values = data.model_dump(exclude={'is_main_contact'})
    contact = EmergencyContact(user_id=current_user.id, is_main_contact=False, **values)
    try:
        db.session.add(contact)
        if data.is_main_contact:
            _make_main(contact)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'save emergency contact')

    get_dispatcher().notify('emergency_contact', {
        'username': current_user.username,
        'contact': contact.to_dict(),
        'timestamp': isoformat(utcnow()),
    })
    return jsonify(contact.to_dict()), 201


def apply_update(contact, data):
    """Applies an EmergencyContactUpdate to ``contact`` and commits. Shared with the admin mirror."""
    changes = data.model_dump(exclude_unset=True)
    main = changes.pop('is_main_contact', None)
    for field, value in changes.items():
        setattr(contact, field, value)

    try:
        if main:
            _make_main(contact)
        elif main is False:
            contact.is_main_contact = False
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'update emergency contact')
    return jsonify(contact.to_dict()), 200


def update_contact(contact_id):
    contact = find_owned(EmergencyContact, contact_id)
    if not contact:
        return not_found('Emergency contact')
    return apply_update(contact, load_payload(EmergencyContactUpdate))


def set_main_contact(contact_id):
    contact = find_owned(EmergencyContact, contact_id)
    if not contact:
        return not_found('Emergency contact')

    try:
        _make_main(contact)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'set main emergency contact')
    return jsonify(contact.to_dict()), 200


def remove_contact(contact):
    try:
        db.session.delete(contact)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'delete emergency contact')
    return jsonify({'message': 'Emergency contact deleted successfully'}), 200


def delete_contact(contact_id):
    contact = find_owned(EmergencyContact, contact_id)
    if not contact:
        return not_found('Emergency contact')
    return remove_contact(contact)
