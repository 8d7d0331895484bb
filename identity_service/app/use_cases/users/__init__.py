"""
User Use Cases
"""

from .register_user_use_case import RegisterUserUseCase
from .get_user_use_case import GetUserUseCase
from .register_user_dto import RegisterUserCommand, RegisterUserResponse, TokenExpiry
from .get_user_dto import UserProfile

__all__ = [
    # Use Cases
    "RegisterUserUseCase",
    "GetUserUseCase",
    # DTOs
    "RegisterUserCommand",
    "RegisterUserResponse",
    "TokenExpiry",
    "UserProfile",
]
