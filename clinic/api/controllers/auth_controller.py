from datetime import datetime, timezone

from flask import jsonify
from flask_jwt_extended import (
    create_access_token, current_user, get_jwt, set_access_cookies, unset_jwt_cookies
)
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error
from clinic.api.schemas import ChangePasswordRequest, LoginRequest, RegisterRequest, load_payload
from clinic.extensions import db
from clinic.models.system_models import RevokedToken
from clinic.models.user_models import Role, User
from clinic.utils.dates import utcnow


def _session_response(user, message, status):
    """Issues an access token for ``user`` and sets it as the session cookie."""
    access_token = create_access_token(identity=str(user.id), additional_claims={'role': user.role.value})
    response = jsonify({'message': message, 'user': user.to_dict()})
    set_access_cookies(response, access_token)
    return response, status


def register_user():
    """Self-service sign-up. The account always gets the ``user`` role."""
    data = load_payload(RegisterRequest)

    if User.query.filter_by(username=data.username).first():
        return jsonify({'error': 'Username already exists'}), 400
    if data.email and User.query.filter_by(email=data.email).first():
        return jsonify({'error': 'Email already exists'}), 400

    user = User(username=data.username, email=data.email, role=Role.USER)
    try:
        user.set_password(data.password)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'register user')

    return _session_response(user, 'Registration successful', 201)


def login_user():
    data = load_payload(LoginRequest)

    user = User.query.filter_by(username=data.username).first()
    if not user or not user.check_password(data.password):
        return jsonify({'error': 'Invalid credentials'}), 401
    if not user.is_active:
        return jsonify({'error': 'Account deactivated'}), 403

    user.last_login = utcnow()
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'log in')

    return _session_response(user, 'Login successful', 200)


def logout_user():
    token = get_jwt()
    expires_at = datetime.fromtimestamp(token['exp'], timezone.utc).replace(tzinfo=None)
    try:
        db.session.add(RevokedToken(jti=token['jti'], expires_at=expires_at))
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'log out')

    response = jsonify({'message': 'Successfully logged out'})
    unset_jwt_cookies(response)
    return response, 200


def get_current_user():
    return jsonify(current_user.to_dict()), 200


def change_user_password():
    data = load_payload(ChangePasswordRequest)
    user = current_user

    if not user.check_password(data.current_password):
        return jsonify({'error': 'Invalid current password'}), 400

    try:
        user.set_password(data.new_password)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'change password')
    return jsonify({'message': 'Password changed successfully'}), 200
