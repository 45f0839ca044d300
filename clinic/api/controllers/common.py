from flask import current_app, jsonify
from flask_jwt_extended import current_user

from clinic.extensions import db


def find_owned(model, record_id):
    """Looks up ``record_id`` on an owner-scoped model.

    Regular users only see their own rows; admins and subadmins see any row.
    A row the caller may not see is reported exactly like a missing one.
    """
    query = model.query.filter_by(id=record_id)
    if not current_user.is_staff:
        query = query.filter_by(user_id=current_user.id)
    return query.first()


def own_rows(model, order_by):
    return model.query.filter_by(user_id=current_user.id).order_by(order_by.desc(), model.id.desc()).all()


def not_found(what):
    return jsonify({'error': f'{what} not found'}), 404


def database_error(error, action):
    db.session.rollback()
    current_app.logger.error(f"Failed to {action}: {error}")
    return jsonify({'error': f'Failed to {action}'}), 500
