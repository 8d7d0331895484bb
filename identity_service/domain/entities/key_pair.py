"""
Key Pair Entity

Per-user RSA key pair backing the security-question fallback.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON
from sqlmodel import Column, DateTime, Field, SQLModel

from identity_service.domain.base import utcnow


class KeyPair(SQLModel, table=True):
    """
    KeyPair entity - one RSA-2048 pair per user.

    Business Rules:
    - Exactly one pair per user (no rotation)
    - Private key PEM is encrypted with the field cipher before storage
    """

    __tablename__ = "biometric_keys"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, unique=True, index=True)

    public_key: str
    encrypted_private_key: str
    threshold_info: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
