"""
Refresh token store.

The store is the only owner of refresh token records. Callers hand it the
opaque token string and get back plain RefreshTokenRecord values, never ORM rows.

Every operation is one atomic unit against the backend:
- SQLRefreshTokenStore issues a single INSERT / SELECT / UPDATE / DELETE per call
- MemoryRefreshTokenStore runs each operation inside one critical section
  (sweep takes the lock once per record)
so two concurrent revokes of the same token cannot both succeed.
"""
from __future__ import annotations

import abc
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.base_model import utcnow
from models.refresh_token import RefreshToken


Clock = Callable[[], datetime]


class StoreError(Exception):
    """Persistence failure not attributable to caller input."""


class TokenConflict(StoreError):
    """A record for this token string already exists."""


@dataclass(frozen=True)
class RefreshTokenRecord:
    token: str
    owner: str
    issued_at: datetime
    expires_at: datetime
    revoked: bool = False

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and now < self.expires_at


class RefreshTokenStore(abc.ABC):
    """Contract shared by every refresh token backend."""

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock

    @abc.abstractmethod
    def issue(self, token: str, owner: str, ttl: timedelta) -> RefreshTokenRecord:
        """Persist a new record expiring `ttl` from now. Raises TokenConflict on duplicates."""

    @abc.abstractmethod
    def validate(self, token: str) -> Optional[str]:
        """Return the owner if the token exists, is not revoked and has not expired."""

    @abc.abstractmethod
    def revoke(self, token: str) -> bool:
        """Flip an active record to revoked. False if missing or already revoked."""

    @abc.abstractmethod
    def sweep(self) -> int:
        """Delete revoked and expired records, return how many were removed."""

    @abc.abstractmethod
    def tokens_of(self, owner: str) -> List[str]:
        """Token strings issued to `owner` (diagnostics only)."""

    @abc.abstractmethod
    def get(self, token: str) -> Optional[RefreshTokenRecord]:
        """Single record lookup (diagnostics only)."""


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        token=row.token,
        owner=row.owner,
        issued_at=row.issued_at,
        expires_at=row.expires_at,
        revoked=bool(row.revoked),
    )


class SQLRefreshTokenStore(RefreshTokenStore):
    """Store backed by the refresh_tokens table through DBStorage."""

    def __init__(self, storage, clock: Clock = utcnow):
        super().__init__(clock)
        self._storage = storage

    @contextmanager
    def _transaction(self):
        session = self._storage.get_session()
        try:
            yield session
            self._storage.save()
        except IntegrityError as exc:
            session.rollback()
            raise TokenConflict("Refresh token already issued") from exc
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(f"{exc.__class__.__name__} in refresh token store") from exc

    def issue(self, token, owner, ttl):
        now = self._clock()
        row = RefreshToken(
            token=token,
            owner=owner,
            issued_at=now,
            expires_at=now + ttl,
            revoked=False,
        )
        with self._transaction():
            self._storage.new(row)
        return _to_record(row)

    def validate(self, token):
        now = self._clock()
        stmt = select(RefreshToken.owner).where(
            RefreshToken.token == token,
            RefreshToken.revoked.is_(False),
            RefreshToken.expires_at > now,
        )
        with self._transaction() as session:
            return session.execute(stmt).scalar_one_or_none()

    def revoke(self, token):
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        with self._transaction() as session:
            result = session.execute(stmt)
        return result.rowcount == 1

    def sweep(self):
        now = self._clock()
        stmt = (
            delete(RefreshToken)
            .where(or_(RefreshToken.revoked.is_(True), RefreshToken.expires_at <= now))
            .execution_options(synchronize_session=False)
        )
        with self._transaction() as session:
            result = session.execute(stmt)
        return result.rowcount

    def tokens_of(self, owner):
        stmt = (
            select(RefreshToken.token)
            .where(RefreshToken.owner == owner)
            .order_by(RefreshToken.issued_at)
        )
        with self._transaction() as session:
            return list(session.execute(stmt).scalars())

    def get(self, token):
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        with self._transaction() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return _to_record(row) if row is not None else None


class MemoryRefreshTokenStore(RefreshTokenStore):
    """Process-local store for development and tests; not shared across workers."""

    def __init__(self, clock: Clock = utcnow):
        super().__init__(clock)
        self._records: Dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def issue(self, token, owner, ttl):
        now = self._clock()
        record = RefreshTokenRecord(token=token, owner=owner, issued_at=now, expires_at=now + ttl)
        with self._lock:
            if token in self._records:
                raise TokenConflict("Refresh token already issued")
            self._records[token] = record
        return record

    def validate(self, token):
        now = self._clock()
        with self._lock:
            record = self._records.get(token)
        if record is None or not record.is_active(now):
            return None
        return record.owner

    def revoke(self, token):
        with self._lock:
            record = self._records.get(token)
            if record is None or record.revoked:
                return False
            self._records[token] = replace(record, revoked=True)
            return True

    def sweep(self):
        now = self._clock()
        removed = 0
        with self._lock:
            candidates = list(self._records)
        for token in candidates:
            with self._lock:
                record = self._records.get(token)
                if record is not None and not record.is_active(now):
                    del self._records[token]
                    removed += 1
        return removed

    def tokens_of(self, owner):
        with self._lock:
            records = [r for r in self._records.values() if r.owner == owner]
        return [r.token for r in sorted(records, key=lambda r: r.issued_at)]

    def get(self, token):
        with self._lock:
            return self._records.get(token)
