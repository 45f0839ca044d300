import secrets

from flask import current_app, jsonify, request
from flask_jwt_extended import current_user
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error, find_owned, not_found, own_rows
from clinic.api.schemas import ExportValidationRequest, MedicalRecordIn, MedicalRecordUpdate, load_payload
from clinic.extensions import db
from clinic.models.appointment_models import Appointment
from clinic.models.medical_models import MedicalRecord, Medication
from clinic.services.notifications import get_dispatcher
from clinic.utils.dates import isoformat, utcnow
from clinic.utils.encryption_util import encryptor

EXPORT_CONTENT_TYPE = 'medical_records_export_v1'


def get_records():
    records = own_rows(MedicalRecord, MedicalRecord.updated_at)
    return jsonify([r.to_dict() for r in records]), 200


def save_record():
    """Creates the caller's medical record on first save and updates it in place afterwards."""
    data = load_payload(MedicalRecordIn)

    record = MedicalRecord.canonical_for(current_user.id)
    action = 'updated' if record else 'created'
    if record is None:
        record = MedicalRecord(user_id=current_user.id)
        db.session.add(record)

    for field, value in data.model_dump().items():
        setattr(record, field, value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'save medical record')

    get_dispatcher().notify('medical_record', {
        'username': current_user.username,
        'action': action,
        'record': {
            'name': record.name,
            'birthDate': record.birth_date,
            'isDiabetic': record.is_diabetic,
            'bloodType': record.blood_type,
            'notes': record.notes,
        },
        'timestamp': isoformat(utcnow()),
    })

    return jsonify(record.to_dict()), 201 if action == 'created' else 200


def update_record(record_id):
    record = find_owned(MedicalRecord, record_id)
    if not record:
        return not_found('Medical record')

    data = load_payload(MedicalRecordUpdate)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(record, field, value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'update medical record')
    return jsonify(record.to_dict()), 200


def delete_record(record_id):
    record = find_owned(MedicalRecord, record_id)
    if not record:
        return not_found('Medical record')

    try:
        db.session.delete(record)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'delete medical record')
    return jsonify({'message': 'Medical record deleted successfully'}), 200


def _build_export():
    record = MedicalRecord.canonical_for(current_user.id)
    appointments = Appointment.query.filter_by(user_id=current_user.id).order_by(Appointment.date).all()
    medications = Medication.query.filter_by(user_id=current_user.id).order_by(Medication.start_date).all()
    return {
        'patientInfo': record.to_dict() if record else None,
        'appointments': [a.to_dict() for a in appointments],
        'medications': [m.to_dict() for m in medications],
        'exportDate': isoformat(utcnow()),
        'exportedBy': current_user.username,
        'exportId': secrets.token_hex(16),
    }


def export_records():
    """Aggregates the caller's canonical record, appointments and medications.

    ``?encrypted=1`` returns the same payload Fernet-encrypted with the server key,
    suitable for a later round trip through ``validate_export``.
    """
    export = _build_export()
    current_app.logger.info(
        f"Medical record export: user_id={current_user.id} export_id={export['exportId']}"
    )

    if request.args.get('encrypted', '').lower() not in ('1', 'true', 'yes'):
        return jsonify(export), 200

    return jsonify({
        'encryptedData': encryptor.encrypt_json(export),
        'metadata': {
            'exportId': export['exportId'],
            'timestamp': export['exportDate'],
            'format': 'Fernet-encrypted JSON',
            'contentType': EXPORT_CONTENT_TYPE,
        },
    }), 200


def validate_export():
    data = load_payload(ExportValidationRequest)

    export = encryptor.decrypt_json(data.encrypted_data)
    if not isinstance(export, dict) or not export.get('exportId') or 'patientInfo' not in export:
        return jsonify({'valid': False, 'error': 'Invalid export data structure'}), 400

    patient_info = export.get('patientInfo') or {}
    return jsonify({
        'valid': True,
        'metadata': {
            'exportId': export['exportId'],
            'exportDate': export.get('exportDate'),
            'exportedBy': export.get('exportedBy'),
            'patientName': patient_info.get('name'),
        },
    }), 200
