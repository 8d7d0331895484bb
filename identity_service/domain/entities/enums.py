"""
Identity Service Domain Enums

All enumeration types used across domain entities and use cases.
"""

from enum import Enum


class UserType(str, Enum):
    """Account type snapshot carried in access token claims"""

    voter = "voter"
    creator = "creator"
    organization = "organization"


class AdminRole(str, Enum):
    """Administrative role snapshot carried in access token claims"""

    manager = "manager"
    admin = "admin"
    moderator = "moderator"
    auditor = "auditor"
    editor = "editor"
    advertiser = "advertiser"
    analyst = "analyst"


class ErrorCode(str, Enum):
    """Caller-visible error codes"""

    # Authentication gate
    NO_ACCESS_TOKEN = "NO_ACCESS_TOKEN"
    ACCESS_TOKEN_INVALID = "ACCESS_TOKEN_INVALID"
    TOKEN_EXPIRED_NO_REFRESH = "TOKEN_EXPIRED_NO_REFRESH"
    REFRESH_TOKEN_INVALID = "REFRESH_TOKEN_INVALID"
    SESSION_INVALID = "SESSION_INVALID"

    # Authorization
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Token codec
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    INVALID_DURATION_FORMAT = "INVALID_DURATION_FORMAT"

    # Users
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"

    # Security questions
    KEYS_NOT_FOUND = "KEYS_NOT_FOUND"
    KEYS_ALREADY_REGISTERED = "KEYS_ALREADY_REGISTERED"
    INVALID_QUESTION_ID = "INVALID_QUESTION_ID"
    ANSWER_MISMATCH = "ANSWER_MISMATCH"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"
    NO_ANSWERS_PROVIDED = "NO_ANSWERS_PROVIDED"

    # Crypto and storage faults
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
