"""
RefreshToken model: one row per issued refresh token so we can revoke and sweep them
Fields:
- token (unique, indexed) - the opaque string handed to the client
- owner - username the token was issued to
- issued_at, expires_at (fixed at issuance, never extended)
- revoked (bool) - once True never goes back
"""
from sqlalchemy import Column, String, Boolean, DateTime, Index
from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(512), nullable=False, unique=True)
    owner = Column(String(30), nullable=False, index=True)
    issued_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        # sweep predicate
        Index("ix_refresh_tokens_revoked_expires", "revoked", "expires_at"),
    )

    def __repr__(self):
        return f"<RefreshToken owner={self.owner} revoked={self.revoked}>"
