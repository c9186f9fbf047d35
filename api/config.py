"""
Environment-aware configuration.
Values come from the process environment (a .env file is read first if present).
Token secrets have no defaults: create_app refuses to start without them.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001,http://localhost:3002,http://localhost:5173"


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")

    # Signing keys; access and refresh tokens must use different secrets
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "30")))
    REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv("REFRESH_TOKEN_EXPIRES_DAYS", "7")))

    # CORS: comma-separated list of allowed origins
    CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS))

    # Flask-Limiter reads RATELIMIT_* keys itself
    LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5 per 15 minutes")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", "true")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///token-auth.db")
    TOKEN_STORE = os.getenv("TOKEN_STORE", "sql")  # sql | memory
    SWEEP_ENABLED = _flag("SWEEP_ENABLED", "true")
    SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "3600"))
    SEED_DEMO_DATA = _flag("SEED_DEMO_DATA", "false")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SEED_DEMO_DATA = _flag("SEED_DEMO_DATA", "true")


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    DATABASE_URL = "sqlite:///:memory:"
    RATELIMIT_ENABLED = False
    SWEEP_ENABLED = False
    SEED_DEMO_DATA = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
