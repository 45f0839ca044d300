# /clinic/utils/error_handlers.py
from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from clinic.api.schemas import PayloadError
from clinic.extensions import db


def register_error_handlers(app):
    @app.errorhandler(PayloadError)
    def invalid_payload(error):
        body = {'error': error.message}
        if error.details:
            body['details'] = error.details
        return jsonify(body), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        # 405, 429 and friends keep their status, only the body shape changes
        return jsonify({'error': error.description or error.name}), error.code

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        current_app.logger.error(f"Unhandled database error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        current_app.logger.exception(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500
