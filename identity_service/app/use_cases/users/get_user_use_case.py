"""
Get User Use Case

Profile lookup for the user themself or a privileged administrator.
"""

from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.utils.encryption import FieldCipher
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return
from .get_user_dto import UserProfile


class GetUserUseCase:
    """Returns a user profile with contact fields decrypted"""

    def __init__(self, uow: UnitOfWork, cipher: FieldCipher):
        self.uow = uow
        self.cipher = cipher

    async def execute(self, user_id: int) -> Result[UserProfile]:
        try:
            return await self._get(user_id)
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to load user"))

    async def _get(self, user_id: int) -> Result[UserProfile]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

            return Return.ok(
                UserProfile(
                    user_id=user.id,
                    user_type=user.user_type,
                    admin_role=user.admin_role,
                    email=self.cipher.decrypt_field(user.email),
                    phone=self.cipher.decrypt_field(user.phone),
                    created_at=user.created_at,
                )
            )
