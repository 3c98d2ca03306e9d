"""
Flask application factory for the content-mix service.

Usage:
    from app import create_app
    app = create_app()

This factory pattern allows:
- Blueprint registration (content + health probes)
- Test isolation via config_override and an injected ContentMixer
- Clean extension initialization
"""
import logging
import os

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from services.health import HealthChecker

logger = logging.getLogger(__name__)


def create_app(config_override: dict = None, mixer=None):
    """
    Create and configure the Flask application.

    Args:
        config_override: Optional dict of Flask config values to apply.
                         Primarily used in tests to inject TESTING=True etc.
        mixer:           Optional prebuilt ContentMixer. When omitted one is
                         built from config/default.yaml + config/providers.yaml.

    Returns:
        Flask: configured app with ``app.content_mixer`` and
        ``app.health_checker`` attached.
    """
    app = Flask(__name__, static_folder=None)

    # Keep response order as built; the mix order is the payload
    app.json.sort_keys = False

    # Apply test / caller overrides last so they take precedence
    if config_override:
        app.config.update(config_override)

    # Trust one level of X-Forwarded-* headers (nginx / reverse proxy).
    # request.remote_addr is the user key handed to providers, so behind a
    # proxy it must be the real client and not 127.0.0.1.
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Configure CORS - any localhost port for dev, extra origins via
    # CORS_ORIGINS env var (comma-separated, e.g. https://yourdomain.com)
    _extra_origins = [o.strip() for o in os.getenv('CORS_ORIGINS', '').split(',') if o.strip()]
    CORS(app, origins=[
        r'^http://localhost:\d+$',
        *_extra_origins,
    ])

    if mixer is None:
        from services.mixer import build_mixer
        mixer = build_mixer()
    app.content_mixer = mixer
    app.health_checker = HealthChecker(mixer)

    from routes.content import content_bp
    from routes.health import health_bp
    app.register_blueprint(content_bp)
    app.register_blueprint(health_bp)

    @app.after_request
    def add_security_headers(response):
        """Add defensive HTTP security headers to every response."""
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('X-Frame-Options', 'DENY')
        response.headers.setdefault('Referrer-Policy', 'no-referrer')
        response.headers.setdefault('Cache-Control', 'no-store')
        return response

    return app
