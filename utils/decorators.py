from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from utils.exceptions import Forbidden, Unauthenticated
from utils.security import ACCESS, TokenFailure, verify


def get_bearer_token() -> str | None:
    """Token from an `Authorization: Bearer <token>` header, None if absent or malformed."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme != "Bearer":
        return None
    return token.strip() or None


def jwt_required():
    """
    Guard a view with an access token.
    Missing token or expired token -> 401, anything else wrong -> 403.
    On success the username is available as g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = get_bearer_token()
            if token is None:
                raise Unauthenticated("Access token required")

            result = verify(
                token,
                current_app.config["ACCESS_TOKEN_SECRET"],
                expected_type=ACCESS,
                algorithm=current_app.config["JWT_ALGORITHM"],
            )
            if result.failure is TokenFailure.EXPIRED:
                raise Unauthenticated("Token expired")
            if not result.ok:
                raise Forbidden("Invalid token")

            g.current_user = result.subject
            g.token_claims = result.claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator
