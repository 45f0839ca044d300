from flask import current_app, jsonify
from flask_jwt_extended import current_user
from sqlalchemy.exc import SQLAlchemyError

from clinic.api.controllers.common import database_error
from clinic.api.schemas import InvitationAccept, InvitationCreate, load_payload
from clinic.extensions import db
from clinic.models.user_models import Invitation, Role, User
from clinic.services.notifications import get_dispatcher
from clinic.utils.dates import isoformat


def invitation_url(token):
    return f"{current_app.config['FRONTEND_URL'].rstrip('/')}/invite/{token}"


def create_invitation():
    data = load_payload(InvitationCreate)
    expiry_days = current_app.config['INVITATION_EXPIRY_DAYS']

    invitation = Invitation.issue(data.email, Role(data.role), current_user, expiry_days)
    try:
        db.session.add(invitation)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'create invitation')

    sent = get_dispatcher().notify('invitation', {
        'url': invitation_url(invitation.token),
        'role': invitation.role.value,
        'expiry_days': expiry_days,
    }, to=invitation.email)

    return jsonify({
        'message': 'Invitation created successfully',
        'invitation': invitation.to_dict(),
        'emailSent': sent,
    }), 201


def check_invitation(token):
    invitation = Invitation.find_valid(token)
    if not invitation:
        return jsonify({'valid': False, 'error': 'Invalid or expired invitation'}), 400
    return jsonify({
        'valid': True,
        'email': invitation.email,
        'role': invitation.role.value,
        'expiresAt': isoformat(invitation.expires_at),
    }), 200


def accept_invitation(token):
    """Creates the invited account and consumes the invitation in one commit."""
    invitation = Invitation.find_valid(token)
    if not invitation:
        return jsonify({'error': 'Invalid or expired invitation'}), 400

    data = load_payload(InvitationAccept)
    if User.query.filter_by(username=data.username).first():
        return jsonify({'error': 'Username already exists'}), 400
    if User.query.filter_by(email=invitation.email).first():
        return jsonify({'error': 'An account with this email already exists'}), 400

    user = User(username=data.username, email=invitation.email, role=invitation.role)
    try:
        user.set_password(data.password)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.add(user)
        db.session.delete(invitation)
        db.session.commit()
    except SQLAlchemyError as e:
        return database_error(e, 'accept invitation')

    return jsonify({'message': 'Account created successfully', 'user': user.to_dict()}), 201
