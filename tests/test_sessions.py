"""
Tests for services.sessions.SessionLifecycle: login, refresh, logout.
"""
from datetime import timedelta

import pytest

from models.token_store import MemoryRefreshTokenStore, StoreError
from services.sessions import SessionLifecycle
from utils.exceptions import Forbidden, InternalError, TokenNotFound, Unauthenticated
from utils.security import REFRESH, TokenFailure, verify

ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"


class BrokenStore(MemoryRefreshTokenStore):
    def issue(self, token, owner, ttl):
        raise StoreError("database unavailable")

    def validate(self, token):
        raise StoreError("database unavailable")

    def revoke(self, token):
        raise StoreError("database unavailable")


def _lifecycle(store):
    return SessionLifecycle(
        store,
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=timedelta(seconds=30),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture
def memory_store(clock):
    return MemoryRefreshTokenStore(clock=clock)


@pytest.fixture
def sessions(memory_store):
    return _lifecycle(memory_store)


class TestLogin:
    @pytest.mark.parametrize("username", ["abc", "Tamara", "Jim-the-3rd", "x" * 30])
    def test_login_then_refresh(self, sessions, username):
        pair = sessions.login(username)
        access_token = sessions.refresh(pair.refresh_token)
        assert sessions.decode_access_token(access_token).subject == username

    def test_refresh_token_is_persisted(self, sessions, memory_store):
        pair = sessions.login("Tamara")
        assert memory_store.validate(pair.refresh_token) == "Tamara"
        assert memory_store.tokens_of("Tamara") == [pair.refresh_token]

    def test_tokens_use_distinct_secrets(self, sessions):
        pair = sessions.login("Tamara")
        assert verify(pair.refresh_token, REFRESH_SECRET, expected_type=REFRESH).ok
        # a refresh token never passes as an access token
        assert sessions.decode_access_token(pair.refresh_token).failure is TokenFailure.INVALID
        assert not verify(pair.access_token, REFRESH_SECRET, expected_type=REFRESH).ok

    def test_multiple_logins_are_independent(self, sessions):
        first = sessions.login("Tamara")
        second = sessions.login("Tamara")
        assert first.refresh_token != second.refresh_token
        sessions.logout(first.refresh_token)
        assert sessions.refresh(second.refresh_token)

    def test_store_failure_is_internal(self):
        with pytest.raises(InternalError):
            _lifecycle(BrokenStore()).login("Tamara")


class TestRefresh:
    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, sessions, token):
        with pytest.raises(Unauthenticated) as exc:
            sessions.refresh(token)
        assert exc.value.message == "Refresh token required"

    def test_unknown_token(self, sessions):
        with pytest.raises(Forbidden) as exc:
            sessions.refresh("not-a-token")
        assert exc.value.message == "Invalid or expired refresh token"

    def test_refresh_token_not_rotated(self, sessions):
        pair = sessions.login("Tamara")
        for _ in range(3):
            assert sessions.refresh(pair.refresh_token)

    def test_expired_refresh_record(self, sessions, clock):
        pair = sessions.login("Tamara")
        clock.advance(days=7, seconds=1)
        with pytest.raises(Forbidden):
            sessions.refresh(pair.refresh_token)

    def test_store_failure_is_internal(self):
        with pytest.raises(InternalError):
            _lifecycle(BrokenStore()).refresh("some-token")


class TestLogout:
    def test_logout_then_refresh_forbidden(self, sessions):
        pair = sessions.login("Tamara")
        sessions.logout(pair.refresh_token)
        with pytest.raises(Forbidden):
            sessions.refresh(pair.refresh_token)

    def test_second_logout_not_found(self, sessions, memory_store):
        pair = sessions.login("Tamara")
        sessions.logout(pair.refresh_token)
        with pytest.raises(TokenNotFound):
            sessions.logout(pair.refresh_token)
        assert memory_store.revoke(pair.refresh_token) is False

    def test_unknown_token(self, sessions):
        with pytest.raises(TokenNotFound):
            sessions.logout("never-issued")

    def test_store_failure_is_internal(self):
        with pytest.raises(InternalError):
            _lifecycle(BrokenStore()).logout("some-token")
