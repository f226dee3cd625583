"""
Crownboard - Whop community leaderboards
Flask application factory
"""
import os
import re
import logging
from flask import Flask, g
from flask_cors import CORS

from .config import get_config, validate_config
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()

    validate_config(config_name)

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Whop renders the app in an iframe on whop.com
    cors_origins = [
        'https://whop.com',
        re.compile(r'https://.*\.whop\.com'),
    ]
    if config_name != 'production':
        cors_origins.append('http://localhost:3000')
        cors_origins.append('http://127.0.0.1:3000')
    CORS(
        app,
        origins=cors_origins,
        supports_credentials=True,
        allow_headers=['Content-Type', 'Authorization', 'x-whop-user-token'],
    )

    if app.config.get('WHOP_AUTH_DEV_MODE'):
        logger.warning('WHOP_AUTH_DEV_MODE is on: requests without a token use the local dev session')

    # Register blueprints
    register_blueprints(app)

    # Register CLI commands
    from .commands import init_app as init_commands
    init_commands(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'crownboard'}

    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.leaderboards import leaderboards_bp
    from .api.session import session_bp

    app.register_blueprint(leaderboards_bp, url_prefix='/api/leaderboards')
    app.register_blueprint(session_bp, url_prefix='/api/session')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from .utils.errors import ErrorCode, error_response, from_exception, internal_error
    from .utils.exceptions import CrownboardError

    @app.errorhandler(CrownboardError)
    def crownboard_error(error):
        return from_exception(error)

    @app.errorhandler(400)
    def bad_request(error):
        return error_response('Bad request', ErrorCode.INVALID_REQUEST, 400, log_error=False)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', ErrorCode.NOT_FOUND, 404, log_error=False)

    @app.errorhandler(500)
    def server_error(error):
        company_id = getattr(g, 'company_id', None)
        return internal_error(details={'company_id': company_id, 'error': str(error)})
