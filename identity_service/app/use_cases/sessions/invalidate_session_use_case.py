"""
Invalidate Session Use Case

Logout and admin revocation.
"""

from sqlalchemy.exc import SQLAlchemyError

from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.libs.result import Result, Return


class InvalidateSessionUseCase:
    """
    Use case for deactivating sessions.

    Business Rules:
    - Sessions are marked inactive, never deleted
    - Invalidating an unknown or already inactive token is not an error
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def invalidate(self, access_token: str) -> Result[dict]:
        """Deactivate the session holding this access token (logout)"""
        try:
            async with self.uow:
                count = await self.uow.sessions.invalidate_by_access_token(access_token)
                await self.uow.commit()
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to invalidate session"))

        return Return.ok({"invalidated": count > 0})

    async def invalidate_all_for_user(self, user_id: int) -> Result[dict]:
        """Deactivate every active session of a user"""
        try:
            async with self.uow:
                count = await self.uow.sessions.invalidate_all_by_user_id(user_id)
                await self.uow.commit()
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to revoke sessions"))

        return Return.ok({"user_id": user_id, "revoked_count": count})
