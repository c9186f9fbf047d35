"""
security helpers:
- JWT signing/verification via PyJWT (HS256 by default)
- JTI generation for token identifiers
- Verification returns an explicit result instead of raising, so callers can
  tell an expired token from a forged or malformed one
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

import jwt

ACCESS = "access"
REFRESH = "refresh"
DEFAULT_ALGORITHM = "HS256"


class TokenFailure(str, Enum):
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass(frozen=True)
class Verification:
    claims: Optional[Dict[str, Any]] = None
    failure: Optional[TokenFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def subject(self) -> Optional[str]:
        return self.claims.get("sub") if self.claims else None


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def sign(
    claims: Dict[str, Any],
    secret: str,
    ttl: timedelta,
    token_type: str = ACCESS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Sign `claims` into a compact JWT that expires `ttl` from now.
    `iat`, `exp`, `jti` and `type` are set here and override anything in claims.
    """
    issued = _now()
    payload = dict(claims)
    payload.update(
        {
            "iat": int(issued.timestamp()),
            "exp": int((issued + ttl).timestamp()),
            "jti": generate_jti(),
            "type": token_type,
        }
    )
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify(
    token: str,
    secret: str,
    expected_type: str = ACCESS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Verification:
    """
    Check the seal and expiry of `token`.
    A correctly signed token past `exp` is EXPIRED; anything else that fails
    (signature, structure, wrong secret, wrong token type) is INVALID.
    """
    if not token:
        return Verification(failure=TokenFailure.INVALID)
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        return Verification(failure=TokenFailure.EXPIRED)
    except jwt.InvalidTokenError:
        return Verification(failure=TokenFailure.INVALID)

    if decoded.get("type") != expected_type or not isinstance(decoded.get("sub"), str):
        return Verification(failure=TokenFailure.INVALID)
    return Verification(claims=decoded)
