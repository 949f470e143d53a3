#!/usr/bin/python3

""" Web server for inkwell. """

import os
import secrets
from pathlib import Path

from flask import Flask, request, g, redirect, url_for
from waitress import serve

import constants
from common.base.logging_config import get_logger
from common.cms import display_name, init_cms_client, post_route_param
from common.config.site_config import init_site_manager, get_site_config
from common.formatting import from_now
from inkwell.decorators.auth import _populate_user, is_editor
logger = get_logger(__name__)

def load_or_create_secret_key() -> str:
    """
    Load Flask secret key from file or create new one if none exists.

    :return: Secret key string
    :raises: RuntimeError if key directory is not writable
    """
    # First check environment variable
    if env_key := os.getenv('FLASK_SECRET_KEY'):
        return env_key

    key_path = Path(constants.KEY_DIR) / 'flask_secret_key'

    try:
        key_path.parent.mkdir(parents=True, exist_ok=True)

        if key_path.exists():
            return key_path.read_text().strip()

        new_key = secrets.token_hex(32)
        key_path.write_text(new_key)
        return new_key

    except OSError as e:
        logger.error(f"Failed to access secret key file: {e}")
        raise RuntimeError(f"Could not access secret key directory: {e}")

def protect_routes():
    """Send anonymous visitors of protected paths to the login page."""
    protected = get_site_config().protected_routes
    if not any(request.path == prefix or request.path.startswith(prefix.rstrip('/') + '/')
               for prefix in protected):
        return None

    _populate_user()
    if g.user:
        return None

    logger.info(f"Redirecting anonymous request for {request.path} to login")
    return redirect(url_for('auth.login_page', redirect=request.full_path.rstrip('?')))

def create_app(testing: bool = False) -> Flask:
    """
    Create and configure Flask application instance.

    :param testing: Whether to configure app for testing
    :return: Configured Flask app
    """
    if testing:
        constants.init_testing()

    # For production, initialization should already be done by launch.py
    if not constants.INITIALIZED:
        raise RuntimeError("System not initialized. In production, launch.py must initialize the system.")

    app = Flask(__name__)
    app.config['TESTING'] = testing

    if not testing:
        app.secret_key = load_or_create_secret_key()
    else:
        app.secret_key = 'test-key'

    # Configure CORS for development mode
    if constants.is_development_mode():
        from flask_cors import CORS
        CORS(app, origins="*", supports_credentials=True)
        logger.info("CORS disabled for development mode - allowing all origins")

    from flask_compress import Compress
    Compress(app)

    site_config = init_site_manager().config
    init_cms_client(site_config)

    app.before_request(protect_routes)

    @app.context_processor
    def inject_site_data():
        return {
            'site': get_site_config(),
            'current_user': getattr(g, 'user', None),
            'is_editor': is_editor,
            'media_url': get_site_config().media_url,
            'from_now': from_now,
            'display_name': display_name,
            'post_route_param': post_route_param,
            'is_development': constants.is_development_mode(),
        }

    # Request logging (skip for testing)
    if not testing:
        from common.base.request_logger import RequestLogger
        RequestLogger(app, log_dir=constants.REQUEST_LOG_DIR)

    from inkwell.blueprints.metrics import setup_request_metrics
    setup_request_metrics(app)

    from inkwell.blueprints import INKWELL_BLUEPRINTS
    for blueprint in INKWELL_BLUEPRINTS:
        app.register_blueprint(blueprint)

    return app

# The app instance will be created when needed
app = None

def get_app():
    """Get or create the Flask application instance."""
    global app
    if app is None:
        app = create_app()
    return app

def run_server(host: str = '0.0.0.0', port: int = 5000, debug: bool = False) -> None:
    """Run the web server: Flask's dev server in debug mode, waitress otherwise."""
    logger.info(f"Starting inkwell server on {host}:{port}")

    if debug:
        app = get_app()
        app.config['DEBUG'] = True
        app.run(host=host, port=port, debug=True)
    else:
        serve(
            get_app(),
            host=host,
            port=port,
            channel_timeout=120,
            cleanup_interval=30,
            connection_limit=100
        )
