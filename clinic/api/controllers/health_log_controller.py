"""Append-only health logs: disease histories, allergies, blood pressure, blood sugar and medications.

Each log supports listing the caller's entries newest first, adding an entry and
deleting one. Measurement timestamps are assigned by the server.
"""
from flask import jsonify
from flask_jwt_extended import current_user
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error, find_owned, not_found, own_rows
from clinic.api.schemas import (
    AllergyRecordIn, BloodPressureIn, BloodSugarIn, DiseaseHistoryIn, MedicationIn, load_payload
)
from clinic.extensions import db
from clinic.models.medical_models import (
    AllergyRecord, BloodPressureRecord, BloodSugarRecord, DiseaseHistory, Medication
)
from clinic.utils.dates import to_naive_utc

# model, schema, newest-first column, label
LOGS = {
    'disease_history': (DiseaseHistory, DiseaseHistoryIn, DiseaseHistory.created_at, 'Disease history'),
    'allergy_record': (AllergyRecord, AllergyRecordIn, AllergyRecord.recorded_at, 'Allergy record'),
    'blood_pressure': (BloodPressureRecord, BloodPressureIn, BloodPressureRecord.measured_at, 'Blood pressure record'),
    'blood_sugar': (BloodSugarRecord, BloodSugarIn, BloodSugarRecord.measured_at, 'Blood sugar record'),
    'medication': (Medication, MedicationIn, Medication.created_at, 'Medication'),
}


def list_entries(kind):
    model, _, recency, _ = LOGS[kind]
    return jsonify([entry.to_dict() for entry in own_rows(model, recency)]), 200


def create_entry(kind):
    model, schema, _, label = LOGS[kind]
    data = load_payload(schema)

    values = data.model_dump(exclude_none=True)
    for field in ('diagnosis_date', 'start_date', 'end_date'):
        if field in values:
            values[field] = to_naive_utc(values[field])

    if kind == 'medication' and values.get('end_date') and values['end_date'] < values['start_date']:
        return jsonify({'error': 'End date cannot be before start date'}), 400

    entry = model(user_id=current_user.id, **values)
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, f'save {label.lower()}')
    return jsonify(entry.to_dict()), 201


def delete_entry(kind, entry_id):
    model, _, _, label = LOGS[kind]
    entry = find_owned(model, entry_id)
    if not entry:
        return not_found(label)

    try:
        db.session.delete(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, f'delete {label.lower()}')
    return jsonify({'message': f'{label} deleted successfully'}), 200
