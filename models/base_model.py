#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the token auth API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps

Notes:
- We use server-side defaults (func.now()) so timestamps are set consistently by the DB.
- For SQLite, func.now() maps to CURRENT_TIMESTAMP.
- Application timestamps (issued_at, expires_at) are naive UTC; see utcnow().
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time without tzinfo, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel:
    """
    Base mixin for all persistent models.

    - id, created_at, updated_at
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        We do NOT force created_at/updated_at in __init__; DB defaults handle those on insert.
        """
        for key, value in kwargs.items():
            setattr(self, key, value)
        # Ensure an id exists if caller passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

