"""
Session Use Cases

Session store operations: create, rotate, invalidate, sweep.
"""

from .create_session_use_case import CreateSessionUseCase
from .rotate_session_use_case import RotateSessionUseCase
from .invalidate_session_use_case import InvalidateSessionUseCase
from .sweep_expired_sessions_use_case import SweepExpiredSessionsUseCase
from .dtos import RotatedSession, SessionCreated, SweepResult, TokenPair

__all__ = [
    # Use Cases
    "CreateSessionUseCase",
    "RotateSessionUseCase",
    "InvalidateSessionUseCase",
    "SweepExpiredSessionsUseCase",
    # DTOs
    "RotatedSession",
    "SessionCreated",
    "SweepResult",
    "TokenPair",
]
