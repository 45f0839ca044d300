from flask import jsonify
from flask_jwt_extended import current_user
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error
from clinic.api.schemas import PatientProfileIn, load_payload
from clinic.extensions import db
from clinic.models.patient_profile_models import PatientProfile


def get_profile():
    profile = PatientProfile.query.filter_by(user_id=current_user.id).first()
    return jsonify(profile.to_dict() if profile else None), 200


def update_profile():
    """Creates the caller's profile on first save; later saves replace only the fields sent."""
    data = load_payload(PatientProfileIn)

    profile = PatientProfile.query.filter_by(user_id=current_user.id).first()
    created = profile is None
    if created:
        profile = PatientProfile(user_id=current_user.id, contact_channel='email', reminders={}, preferences={})
        db.session.add(profile)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        # JSON columns need a fresh object to register the change
        setattr(profile, field, dict(value) if isinstance(value, dict) else value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'save patient profile')
    return jsonify(profile.to_dict()), 201 if created else 200
