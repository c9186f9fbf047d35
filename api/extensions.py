"""
Flask extension setup.

Each app built by create_app() gets its own Limiter, so its enabled flag and
counter storage never leak into another app in the same process.
"""
import logging

from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

logger = logging.getLogger(__name__)


def init_extensions(app):
    # Cross-Origin Resource Sharing restricted to the configured callers
    CORS(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    # Keyed by client address; RATELIMIT_* keys come from app.config
    limiter = Limiter(get_remote_address, app=app, default_limits=[], strategy="moving-window")
    app.extensions["rate_limiter"] = limiter
    if not app.config.get("RATELIMIT_ENABLED", True):
        logger.info("Rate limiting disabled")
    return limiter


def limit_login(app, endpoint="auth.login"):
    """Wrap the registered login view with LOGIN_RATE_LIMIT (call after blueprints are registered)."""
    limiter = app.extensions["rate_limiter"]
    view = app.view_functions[endpoint]
    app.view_functions[endpoint] = limiter.limit(lambda: app.config["LOGIN_RATE_LIMIT"])(view)
