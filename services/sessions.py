"""
Session use cases: login, refresh, logout.

SessionLifecycle composes the token signer and the refresh token store.
Failures the caller can act on come out as utils.exceptions errors; store or
signing failures are logged here and surface as a generic InternalError.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

import jwt

from models.token_store import RefreshTokenStore, StoreError
from utils import security
from utils.exceptions import Forbidden, InternalError, TokenNotFound, Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class SessionLifecycle:
    def __init__(
        self,
        store: RefreshTokenStore,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = security.DEFAULT_ALGORITHM,
    ):
        self.store = store
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm

    def _mint_access(self, username: str) -> str:
        return security.sign(
            {"sub": username}, self._access_secret, self.access_ttl,
            token_type=security.ACCESS, algorithm=self.algorithm,
        )

    def login(self, username: str) -> TokenPair:
        """
        Issue an access/refresh pair for `username`.
        The refresh token is committed to the store before it is returned.
        """
        try:
            access_token = self._mint_access(username)
            refresh_token = security.sign(
                {"sub": username}, self._refresh_secret, self.refresh_ttl,
                token_type=security.REFRESH, algorithm=self.algorithm,
            )
            self.store.issue(refresh_token, username, self.refresh_ttl)
        except (StoreError, jwt.PyJWTError) as exc:
            logger.exception("Login failed for user=%s", username)
            raise InternalError() from exc
        logger.info("Issued session for user=%s", username)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def refresh(self, token: str | None) -> str:
        """Mint a new access token from a live refresh token. The refresh token is not rotated."""
        if not token:
            raise Unauthenticated("Refresh token required")
        try:
            owner = self.store.validate(token)
        except StoreError as exc:
            logger.exception("Refresh token lookup failed")
            raise InternalError() from exc
        if owner is None:
            raise Forbidden("Invalid or expired refresh token")
        try:
            return self._mint_access(owner)
        except jwt.PyJWTError as exc:
            logger.exception("Access token signing failed for user=%s", owner)
            raise InternalError() from exc

    def logout(self, token: str) -> None:
        try:
            revoked = self.store.revoke(token)
        except StoreError as exc:
            logger.exception("Refresh token revocation failed")
            raise InternalError() from exc
        if not revoked:
            raise TokenNotFound("Token not found or already revoked")

    def decode_access_token(self, token: str) -> security.Verification:
        return security.verify(token, self._access_secret, security.ACCESS, self.algorithm)
