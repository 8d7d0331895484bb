"""
Session Use Case DTOs
"""

from typing import Optional
from pydantic import BaseModel

from identity_service.api.utils.jwt import AccessClaims


class TokenPair(BaseModel):
    """Access/refresh token pair handed back to the client"""

    access_token: str
    refresh_token: str


class RotatedSession(BaseModel):
    """Outcome of a committed rotation: the new pair and its verified claims"""

    tokens: TokenPair
    claims: AccessClaims


class SessionCreated(BaseModel):
    """Response for session creation"""

    session_id: str
    user_id: int
    user_type: str
    admin_role: Optional[str]
    access_token: str
    refresh_token: str


class SweepResult(BaseModel):
    """Response for expired session sweep"""

    deactivated_count: int
