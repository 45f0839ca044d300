from flask import jsonify
from flask_jwt_extended import current_user
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error, find_owned, not_found
from clinic.api.schemas import AppointmentIn, RescheduleRequest, load_payload
from clinic.extensions import db
from clinic.models.appointment_models import Appointment, AppointmentStatus, InvalidTransition
from clinic.utils.dates import to_naive_utc


def get_appointments():
    appointments = (Appointment.query.filter_by(user_id=current_user.id)
                    .order_by(Appointment.date.desc(), Appointment.id.desc())
                    .all())
    return jsonify([a.to_dict() for a in appointments]), 200


def create_appointment():
    """Books an appointment for the caller. New appointments always start as pending."""
    data = load_payload(AppointmentIn)

    appointment = Appointment(
        user_id=current_user.id,
        date=to_naive_utc(data.date),
        department=data.department,
        notes=data.notes,
        status=AppointmentStatus.PENDING,
    )
    try:
        db.session.add(appointment)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'create appointment')
    return jsonify({'message': 'Appointment created successfully', 'appointment': appointment.to_dict()}), 201


def get_appointment(appointment_id):
    appointment = find_owned(Appointment, appointment_id)
    if not appointment:
        return not_found('Appointment')
    return jsonify(appointment.to_dict()), 200


def cancel_appointment(appointment_id):
    appointment = find_owned(Appointment, appointment_id)
    if not appointment:
        return not_found('Appointment')

    try:
        appointment.transition_to(AppointmentStatus.CANCELLED)
    except InvalidTransition as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'cancel appointment')
    return jsonify({'message': 'Appointment cancelled', 'appointment': appointment.to_dict()}), 200


def reschedule_appointment(appointment_id):
    appointment = find_owned(Appointment, appointment_id)
    if not appointment:
        return not_found('Appointment')

    data = load_payload(RescheduleRequest)
    try:
        appointment.reschedule(to_naive_utc(data.date))
    except InvalidTransition as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'reschedule appointment')
    return jsonify({'message': 'Appointment rescheduled', 'appointment': appointment.to_dict()}), 200


def delete_appointment(appointment_id):
    appointment = find_owned(Appointment, appointment_id)
    if not appointment:
        return not_found('Appointment')
    if not appointment.is_deletable:
        return jsonify({'error': 'Only cancelled appointments can be deleted'}), 400

    try:
        db.session.delete(appointment)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'delete appointment')
    return jsonify({'message': 'Appointment deleted successfully'}), 200
