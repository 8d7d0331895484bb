"""
Authentication Use Case DTOs (Data Transfer Objects)

Resolved identity handed to downstream handlers.
"""

from typing import Optional
from pydantic import BaseModel

from identity_service.app.use_cases.sessions.dtos import TokenPair


class AuthenticatedIdentity(BaseModel):
    """Identity resolved by the authentication gate"""

    user_id: int
    user_type: str
    admin_role: Optional[str] = None
    access_token: str
    token_rotated: bool = False
    new_tokens: Optional[TokenPair] = None
