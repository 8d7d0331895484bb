"""
Use Cases

Organized by domain folder:
- auth/: Authentication gate and authorization checks
- sessions/: Session store operations
- security_questions/: Key enrollment and challenge/response
- users/: User registration and profile lookup

Import from subdirectories for better organization.
"""

from .auth import AuthenticateUseCase
from .sessions import (
    CreateSessionUseCase,
    InvalidateSessionUseCase,
    RotateSessionUseCase,
    SweepExpiredSessionsUseCase,
)
from .security_questions import (
    AddSecurityQuestionUseCase,
    GetSecurityQuestionsUseCase,
    RegisterKeysUseCase,
    VerifySecurityAnswersUseCase,
)
from .users import GetUserUseCase, RegisterUserUseCase

__all__ = [
    # Auth
    "AuthenticateUseCase",
    # Sessions
    "CreateSessionUseCase",
    "InvalidateSessionUseCase",
    "RotateSessionUseCase",
    "SweepExpiredSessionsUseCase",
    # Security questions
    "AddSecurityQuestionUseCase",
    "GetSecurityQuestionsUseCase",
    "RegisterKeysUseCase",
    "VerifySecurityAnswersUseCase",
    # Users
    "GetUserUseCase",
    "RegisterUserUseCase",
]
