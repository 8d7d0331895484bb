"""
Identity Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AdminRole,
    ErrorCode,
    UserType,
)

# Export all entities
from .user import User
from .session import Session
from .key_pair import KeyPair
from .security_question import SecurityQuestion

__all__ = [
    # Enums
    "AdminRole",
    "ErrorCode",
    "UserType",
    # Entities
    "User",
    "Session",
    "KeyPair",
    "SecurityQuestion",
]
