"""
Background sweep of revoked and expired refresh tokens.

Uses APScheduler's BackgroundScheduler with an interval trigger. The sweeper is
started by the app factory and stopped at interpreter exit; stop() waits for a
sweep that is already running.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from models.token_store import RefreshTokenStore, StoreError

logger = logging.getLogger(__name__)

JOB_ID = "refresh-token-sweep"


class TokenSweeper:
    def __init__(
        self,
        store: RefreshTokenStore,
        interval_seconds: int = 3600,
        on_done: Optional[Callable[[], None]] = None,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        # Called after every run, e.g. to release the thread-local DB session
        self._on_done = on_done
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> int:
        try:
            removed = self.store.sweep()
        except StoreError:
            logger.exception("Refresh token sweep failed")
            return 0
        finally:
            if self._on_done:
                self._on_done()
        logger.info("Swept %d refresh tokens", removed)
        return removed

    def start(self):
        if self.running:
            return
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Token sweeper started (every %ss)", self.interval_seconds)

    def stop(self, wait: bool = True):
        if not self.running:
            return
        self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("Token sweeper stopped")
