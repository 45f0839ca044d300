from flask import Flask, jsonify

from clinic.extensions import db, bcrypt, jwt, limiter, cors
from clinic.utils.encryption_util import encryptor
from clinic.utils.error_handlers import register_error_handlers
from clinic.services.notifications import EmailDispatcher
from clinic.monitoring import Monitoring
from clinic.commands import register_commands
from config import config


def create_app(config_name='default'):
    app = Flask(__name__)
    config_class = config[config_name]
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        origins=app.config['ALLOWED_ORIGINS'],
        supports_credentials=True,
        allow_headers=['Content-Type', 'Authorization', 'X-Requested-With', 'X-CSRF-TOKEN'],
        methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
    )

    # Initialize custom utilities
    encryptor.init_app(app)
    EmailDispatcher(app)
    Monitoring(app)

    # Initialize app with config
    config_class.init_app(app)

    register_jwt_callbacks()

    # Register blueprints
    from clinic.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    # Register error handlers and commands
    register_error_handlers(app)
    register_commands(app)

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    return app


def register_jwt_callbacks():
    from clinic.models.system_models import RevokedToken
    from clinic.models.user_models import User

    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_payload):
        user = db.session.get(User, int(jwt_payload['sub']))
        if user is None or not user.is_active:
            return None
        return user

    # JWT token blacklist checker
    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        jti = jwt_payload['jti']
        return RevokedToken.query.filter_by(jti=jti).first() is not None

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': 'Not authenticated'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': 'Invalid session token'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Session expired'}), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Session has been revoked'}), 401

    @jwt.user_lookup_error_loader
    def user_lookup_error(jwt_header, jwt_payload):
        return jsonify({'error': 'User not found or inactive'}), 401
