"""
Error taxonomy shared by the gate, the session use cases and the error handlers.

Each error carries the HTTP status and the machine-readable code that
api.errors renders into the uniform error envelope.
"""
from __future__ import annotations


class ApiError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class Unauthenticated(ApiError):
    """Credential absent or expired (client should log in or refresh)."""
    status = 401
    code = "UNAUTHENTICATED"
    message = "Authentication required"


class Forbidden(ApiError):
    """Credential present and well-formed but not acceptable."""
    status = 403
    code = "FORBIDDEN"
    message = "Invalid token"


class TokenNotFound(ApiError):
    status = 400
    code = "TOKEN_NOT_FOUND"
    message = "Token not found or already revoked"


class InternalError(ApiError):
    pass


class ConfigurationError(RuntimeError):
    """Raised at start-up when required settings are missing or unusable."""
