"""
Authentication Use Cases

Request authentication gate and authorization checks.
"""

from .authenticate_use_case import AuthenticateUseCase
from .authorization import require_admin, require_role, require_self_or_role
from .dtos import AuthenticatedIdentity

__all__ = [
    # Use Cases
    "AuthenticateUseCase",
    # Authorization checks
    "require_admin",
    "require_role",
    "require_self_or_role",
    # DTOs
    "AuthenticatedIdentity",
]
