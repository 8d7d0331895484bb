"""
Security Question Entity
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, SQLModel

from identity_service.domain.base import utcnow


class SecurityQuestion(SQLModel, table=True):
    """
    SecurityQuestion entity - immutable once created.

    Business Rules:
    - encrypted_answer is base64 RSA-OAEP ciphertext under the user's public key
    - signature is the hex SHA-256 digest of the plaintext answer
    - Question text is the only field ever returned to callers
    """

    __tablename__ = "security_questions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)

    question: str = Field(max_length=500)
    encrypted_answer: str
    signature: str = Field(max_length=64)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
