from datetime import timedelta

from flask import jsonify
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers import emergency_contact_controller
from clinic.api.controllers.common import database_error, not_found
from clinic.api.schemas import AppointmentStatusUpdate, EmergencyContactUpdate, load_payload
from clinic.extensions import db
from clinic.models.appointment_models import Appointment, InvalidTransition
from clinic.models.emergency_contact_models import EmergencyContact
from clinic.models.medical_models import (
    BloodPressureRecord, BloodSugarRecord, DiseaseHistory, MedicalRecord, Medication
)
from clinic.models.user_models import Role, User
from clinic.utils.dates import isoformat, utcnow

RECENT_APPOINTMENTS_LIMIT = 5

# model, newest-first column
LISTINGS = {
    'medical_records': (MedicalRecord, MedicalRecord.updated_at),
    'blood_pressure': (BloodPressureRecord, BloodPressureRecord.measured_at),
    'blood_sugar': (BloodSugarRecord, BloodSugarRecord.measured_at),
    'disease_histories': (DiseaseHistory, DiseaseHistory.created_at),
    'medications': (Medication, Medication.created_at),
    'appointments': (Appointment, Appointment.date),
    'emergency_contacts': (EmergencyContact, EmergencyContact.created_at),
}


def _with_owner(row, username):
    data = row.to_dict()
    data['user'] = {'username': username}
    return data


# --- Admin only ---

def get_all_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([u.to_dict() for u in users]), 200


def get_user_details(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return not_found('User')

    return jsonify({
        'user': user.to_dict(),
        'medicalRecords': [r.to_dict() for r in user.medical_records.order_by(MedicalRecord.updated_at.desc())],
        'appointments': [a.to_dict() for a in user.appointments.order_by(Appointment.date.desc())],
        'medications': [m.to_dict() for m in user.medications.order_by(Medication.created_at.desc())],
        'emergencyContacts': [c.to_dict() for c in user.emergency_contacts.order_by(EmergencyContact.created_at)],
    }), 200


def get_stats():
    now = utcnow()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_of_day = start_of_day + timedelta(days=1)

    total_patients = db.session.scalar(
        db.select(func.count(User.id)).where(User.role == Role.USER)
    )
    today_appointments = db.session.scalar(
        db.select(func.count(Appointment.id))
        .where(Appointment.date >= start_of_day, Appointment.date < end_of_day)
    )
    active_prescriptions = db.session.scalar(
        db.select(func.count(Medication.id))
        .where(Medication.start_date <= now, or_(Medication.end_date.is_(None), Medication.end_date >= now))
    )

    return jsonify({
        'totalPatients': total_patients,
        'todayAppointments': today_appointments,
        'activePrescriptions': active_prescriptions,
    }), 200


def get_recent_appointments():
    rows = (db.session.query(Appointment, User.username)
            .outerjoin(User, Appointment.user_id == User.id)
            .order_by(Appointment.date.desc(), Appointment.id.desc())
            .limit(RECENT_APPOINTMENTS_LIMIT)
            .all())
    return jsonify([
        {
            'id': appointment.id,
            'patientName': username,
            'date': isoformat(appointment.date),
            'department': appointment.department,
            'status': appointment.status.value,
        }
        for appointment, username in rows
    ]), 200


def get_subadmins():
    subadmins = User.query.filter_by(role=Role.SUBADMIN).order_by(User.created_at.desc()).all()
    return jsonify([u.to_dict() for u in subadmins]), 200


def update_appointment_status(appointment_id):
    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        return not_found('Appointment')

    data = load_payload(AppointmentStatusUpdate)
    try:
        appointment.transition_to(data.status)
    except InvalidTransition as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'update appointment status')
    return jsonify({'message': 'Appointment status updated', 'appointment': appointment.to_dict()}), 200


# --- Staff (admin and subadmin) ---

def list_all(kind):
    """Cross-user listing of one entity kind, each row tagged with its owner's username."""
    model, recency = LISTINGS[kind]
    rows = (db.session.query(model, User.username)
            .outerjoin(User, model.user_id == User.id)
            .order_by(recency.desc(), model.id.desc())
            .all())
    return jsonify([_with_owner(row, username) for row, username in rows]), 200


def update_emergency_contact(contact_id):
    contact = db.session.get(EmergencyContact, contact_id)
    if not contact:
        return not_found('Emergency contact')
    return emergency_contact_controller.apply_update(contact, load_payload(EmergencyContactUpdate))


def delete_emergency_contact(contact_id):
    contact = db.session.get(EmergencyContact, contact_id)
    if not contact:
        return not_found('Emergency contact')
    return emergency_contact_controller.remove_contact(contact)
