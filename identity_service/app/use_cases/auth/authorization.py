"""
Authorization checks layered on top of an authenticated identity.

Pure functions: no storage access.
"""

from typing import Iterable

from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return
from .dtos import AuthenticatedIdentity


def require_admin(identity: AuthenticatedIdentity) -> Result[AuthenticatedIdentity]:
    """Fail with ADMIN_REQUIRED when the identity carries no admin role"""
    if not identity.admin_role:
        return Return.err(Error(ErrorCode.ADMIN_REQUIRED, "Admin access required"))
    return Return.ok(identity)


def require_role(
    identity: AuthenticatedIdentity, allowed_roles: Iterable[str]
) -> Result[AuthenticatedIdentity]:
    """Fail with INSUFFICIENT_PERMISSIONS unless the admin role is in allowed_roles"""
    allowed = {str(getattr(role, "value", role)) for role in allowed_roles}
    if not identity.admin_role or identity.admin_role not in allowed:
        return Return.err(
            Error(ErrorCode.INSUFFICIENT_PERMISSIONS, "Insufficient permissions")
        )
    return Return.ok(identity)


def require_self_or_role(
    identity: AuthenticatedIdentity, user_id: int, allowed_roles: Iterable[str]
) -> Result[AuthenticatedIdentity]:
    """Allow access to the caller's own records, or to another user's with an allowed role"""
    if identity.user_id == user_id:
        return Return.ok(identity)
    return require_role(identity, allowed_roles)
