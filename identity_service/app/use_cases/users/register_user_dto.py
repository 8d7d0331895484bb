"""
Register User Use Case DTOs (Data Transfer Objects)

Command/Response pattern:
- RegisterUserCommand: Input to use case (validated registration intent)
- RegisterUserResponse: Output from use case
"""

from typing import Optional
from pydantic import BaseModel


class RegisterUserCommand(BaseModel):
    """
    Register user command - profile created for an id issued by the auth service
    """

    user_id: int
    email: Optional[str] = None
    phone: Optional[str] = None
    device_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class TokenExpiry(BaseModel):
    """Configured token lifetimes, echoed to the client"""

    access_token: str
    refresh_token: str


class RegisterUserResponse(BaseModel):
    """Register user response - profile summary plus the first token pair"""

    user_id: int
    user_type: str
    admin_role: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    session_id: str
    access_token: str
    refresh_token: str
    token_expiry: TokenExpiry
