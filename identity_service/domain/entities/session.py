"""
Session Entity

One authenticated device/user pairing holding the current token pair.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from identity_service.domain.base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - binds a token pair to a user, device and validity window.

    Business Rules:
    - access_token holds the exact JWT value the gate looks up
    - Refresh tokens are stored as SHA-256 hashes
    - jwt_token_id is the jti of the current access token, replaced on every rotation
    - user_type/admin_role are a snapshot reused verbatim on rotation
    - expires_at (access) <= refresh_expires_at
    - Rows are deactivated, never deleted
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)

    access_token: str = Field(max_length=2048, index=True)
    refresh_token_hash: str = Field(max_length=64)  # SHA-256 hex digest
    jwt_token_id: UUID = Field(default_factory=uuid4)

    device_id: Optional[str] = Field(default=None, max_length=255)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    user_type: str = Field(max_length=32)
    admin_role: Optional[str] = Field(default=None, max_length=32)

    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_activity: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    refresh_expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_refresh_device", "refresh_token_hash", "device_id"),
        Index("idx_session_refresh_expires_at", "refresh_expires_at"),
        Index("idx_session_active", "is_active"),
    )
