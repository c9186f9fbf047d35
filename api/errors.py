from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from utils.exceptions import ApiError

logger = logging.getLogger(__name__)

# Uniform codes for werkzeug HTTP errors
HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "RATE_LIMITED",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Endpoint not found", 404)

    # 429 Too Many Requests (Flask-Limiter)
    @app.errorhandler(429)
    def rate_limited(e):
        logger.warning("Rate limit exceeded: %s", e.description)
        return error_response("RATE_LIMITED", "Too many login attempts, please try again later.", 429)

    # Marshmallow validation errors: request body did not match the schema
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    # Auth and session errors carry their own status/code
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status >= 500:
            return error_response(err.code, ApiError.message, err.status)
        return error_response(err.code, err.message, err.status)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_CODES.get(status, "HTTP_ERROR"), err.description, status)

    # 500 Internal Error (catch-all); never leak exception details to the client
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)
