from functools import wraps

from flask import request, current_app, jsonify, make_response
from flask_jwt_extended import current_user, get_jwt_identity, verify_jwt_in_request
from sqlalchemy.exc import SQLAlchemyError

from clinic.extensions import db
from clinic.models.system_models import AuditLog


def role_required(*roles):
    """Admits the request only for an authenticated user holding one of ``roles``.

    With no roles, any authenticated, active user is admitted. Missing, invalid,
    expired or revoked tokens are rejected with 401 by the JWT callbacks before
    the view body runs; a role outside ``roles`` gets 403.
    """
    allowed = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            if allowed and current_user.role not in allowed:
                return jsonify({'error': 'Permission denied'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def audit_log(action, resource):
    """Records every call of the decorated view in the audit table and the audit logger."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_id = None
            ip_address = request.remote_addr
            user_agent = (request.headers.get('User-Agent') or '')[:255]

            try:
                # Attempt to get user_id from a verified JWT
                identity = get_jwt_identity()
                user_id = int(identity) if identity is not None else None
            except RuntimeError:
                # No JWT verified for this request (e.g., login or invitation acceptance)
                pass

            try:
                raw_response = f(*args, **kwargs)
            except Exception as e:
                _write_audit_entry(user_id, action, resource, ip_address, user_agent, False,
                                   f"An error occurred: {str(e)}")
                raise

            response = make_response(raw_response)
            success = response.status_code < 400
            details = f"Status: {response.status_code}"

            # Login, registration and invitation acceptance identify the user in the response
            if user_id is None and success and response.is_json:
                user_data = (response.get_json(silent=True) or {}).get('user') or {}
                user_id = user_data.get('id')

            _write_audit_entry(user_id, action, resource, ip_address, user_agent, success, details)
            return response

        return decorated_function
    return decorator


def _write_audit_entry(user_id, action, resource, ip_address, user_agent, success, details):
    log_entry = AuditLog(
        user_id=user_id,
        action=action,
        resource=resource,
        ip_address=ip_address,
        user_agent=user_agent,
        success=success,
        details=details
    )
    try:
        db.session.add(log_entry)
        db.session.commit()
    except SQLAlchemyError as db_error:
        db.session.rollback()
        current_app.audit_logger.error(f"Failed to write audit entry due to DB error: {db_error}")

    log = current_app.audit_logger.info if success else current_app.audit_logger.warning
    log(f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='{success}', Details='{details}'")
