"""
Tests for services.sweeper.TokenSweeper lifecycle and single runs.
"""
import threading
import time
from datetime import timedelta

from models.token_store import MemoryRefreshTokenStore, StoreError
from services.sweeper import JOB_ID, TokenSweeper


class FailingStore(MemoryRefreshTokenStore):
    def sweep(self):
        raise StoreError("database unavailable")


class SlowStore(MemoryRefreshTokenStore):
    """Sweep that blocks long enough for stop() to overlap it."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.finished = threading.Event()

    def sweep(self):
        self.started.set()
        time.sleep(0.5)
        self.finished.set()
        return 0


class TestRunOnce:
    def test_removes_revoked_and_expired(self, clock):
        store = MemoryRefreshTokenStore(clock=clock)
        store.issue("revoked", "Tamara", timedelta(days=7))
        store.issue("expired", "Tamara", timedelta(minutes=1))
        store.issue("active", "Tamara", timedelta(days=7))
        store.revoke("revoked")
        clock.advance(minutes=2)

        assert TokenSweeper(store).run_once() == 2
        assert store.tokens_of("Tamara") == ["active"]

    def test_calls_on_done(self, clock):
        calls = []
        sweeper = TokenSweeper(MemoryRefreshTokenStore(clock=clock), on_done=lambda: calls.append(1))
        sweeper.run_once()
        assert calls == [1]

    def test_store_failure_is_logged_not_raised(self, caplog):
        calls = []
        sweeper = TokenSweeper(FailingStore(), on_done=lambda: calls.append(1))
        assert sweeper.run_once() == 0
        assert calls == [1]
        assert "Refresh token sweep failed" in caplog.text


class TestLifecycle:
    def test_start_and_stop(self):
        sweeper = TokenSweeper(MemoryRefreshTokenStore(), interval_seconds=3600)
        assert not sweeper.running
        sweeper.start()
        try:
            assert sweeper.running
            job = sweeper._scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.trigger.interval == timedelta(seconds=3600)
            # starting twice keeps a single scheduler
            scheduler = sweeper._scheduler
            sweeper.start()
            assert sweeper._scheduler is scheduler
        finally:
            sweeper.stop()
        assert not sweeper.running

    def test_stop_when_not_started(self):
        TokenSweeper(MemoryRefreshTokenStore()).stop()

    def test_app_starts_sweeper_when_enabled(self, make_app):
        app = make_app(SWEEP_ENABLED=True, SWEEP_INTERVAL_SECONDS=60)
        sweeper = app.extensions["sweeper"]
        try:
            assert sweeper.running
        finally:
            sweeper.stop()

    def test_stop_waits_for_running_sweep(self):
        store = SlowStore()
        sweeper = TokenSweeper(store, interval_seconds=1)
        sweeper.start()
        try:
            assert store.started.wait(timeout=5)
        finally:
            sweeper.stop()
        assert store.finished.is_set()
        assert not sweeper.running
