import atexit
import logging
import time

from flask import Flask, g, request
from flasgger import Swagger

from .config import get_config
from .errors import register_error_handlers
from .extensions import init_extensions, limit_login
from models.db_storage import DBStorage
from models.token_store import MemoryRefreshTokenStore, SQLRefreshTokenStore
from services.sessions import SessionLifecycle
from services.sweeper import TokenSweeper
from utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Token Auth API",
        "version": "1.0.0",
        "description": "Issues, refreshes and revokes JWT access/refresh tokens and guards protected resources.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

REQUIRED_SECRETS = ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET")


def check_secrets(config) -> None:
    """Fail start-up when signing secrets are missing or shared."""
    missing = [name for name in REQUIRED_SECRETS if not config.get(name)]
    if missing:
        for name in missing:
            logger.error("Missing required environment variable: %s", name)
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
    if config["ACCESS_TOKEN_SECRET"] == config["REFRESH_TOKEN_SECRET"]:
        raise ConfigurationError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")


def _build_store(app, storage):
    kind = app.config.get("TOKEN_STORE", "sql").lower()
    if kind == "memory":
        return MemoryRefreshTokenStore()
    if kind == "sql":
        return SQLRefreshTokenStore(storage)
    raise ConfigurationError(f"Unknown TOKEN_STORE: {kind}")


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` is applied on top of the selected config class (used by tests).
    Raises ConfigurationError when the token secrets are unusable.
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    check_secrets(app.config)

    init_extensions(app)

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"])
    storage.reload()
    store = _build_store(app, storage)
    sessions = SessionLifecycle(
        store,
        access_secret=app.config["ACCESS_TOKEN_SECRET"],
        refresh_secret=app.config["REFRESH_TOKEN_SECRET"],
        access_ttl=app.config["ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=app.config["REFRESH_TOKEN_EXPIRES"],
        algorithm=app.config["JWT_ALGORITHM"],
    )
    sweeper = TokenSweeper(store, app.config["SWEEP_INTERVAL_SECONDS"], on_done=storage.close)

    app.extensions["storage"] = storage
    app.extensions["token_store"] = store
    app.extensions["sessions"] = sessions
    app.extensions["sweeper"] = sweeper

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .posts import bp as posts_bp, seed_demo_posts
    from .cli import tokens_cli

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(posts_bp)
    limit_login(app)
    app.cli.add_command(tokens_cli)

    if app.config["SEED_DEMO_DATA"]:
        seed_demo_posts(storage)
        storage.close()

    if app.config["SWEEP_ENABLED"]:
        sweeper.start()
        # waits for an in-flight sweep before the interpreter exits
        atexit.register(sweeper.stop)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info("%s %s - %s - %.1fms", request.method, request.path, response.status_code, duration_ms)
        return response

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Token Auth API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    return app
