"""
User Entity

Identity record owned by the upstream auth service; this service keeps the
role snapshot used for token claims plus encrypted contact fields.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from identity_service.domain.base import utcnow

from .enums import AdminRole, UserType


class User(SQLModel, table=True):
    """
    User entity - account profile and role snapshot source.

    Business Rules:
    - id is assigned by the upstream auth service (not auto-generated)
    - email and phone are stored as AES-256-GCM envelopes
    - user_type/admin_role are copied onto each session at creation time
    """

    __tablename__ = "users"

    id: int = Field(primary_key=True)
    email: Optional[str] = Field(default=None, max_length=512)
    phone: Optional[str] = Field(default=None, max_length=512)

    user_type: str = Field(default=UserType.voter.value, max_length=32)
    admin_role: Optional[str] = Field(default=AdminRole.analyst.value, max_length=32)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_admin_role", "admin_role"),)
