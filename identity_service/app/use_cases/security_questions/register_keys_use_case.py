"""
Register Keys Use Case

Enrolls a user in the security-question fallback by generating their RSA pair.
"""

import asyncio

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from identity_service.api.utils.encryption import FieldCipher, generate_key_pair
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.entities import ErrorCode, KeyPair
from identity_service.libs.result import Error, Result, Return
from .dtos import KeysRegistered

KEYS_EXIST = Error(ErrorCode.KEYS_ALREADY_REGISTERED, "User keys already registered")


class RegisterKeysUseCase:
    """
    Use case for key pair enrollment.

    Business Rules:
    - User must exist
    - One key pair per user; re-registration is rejected, including a
      concurrent one caught by the unique user_id
    - RSA-2048; private key PEM is encrypted with the field cipher at rest
    - Only the public key is returned
    """

    def __init__(self, uow: UnitOfWork, cipher: FieldCipher):
        self.uow = uow
        self.cipher = cipher

    async def execute(self, user_id: int) -> Result[KeysRegistered]:
        try:
            return await self._register(user_id)
        except IntegrityError:
            # A concurrent enrollment won the unique user_id
            return Return.err(KEYS_EXIST)
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to register keys"))

    async def _register(self, user_id: int) -> Result[KeysRegistered]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

            existing = await self.uow.key_pairs.get_by_user_id(user_id)
            if existing is not None:
                return Return.err(KEYS_EXIST)

            # Key generation is CPU bound; keep it off the event loop
            public_pem, private_pem = await asyncio.to_thread(generate_key_pair)

            key_pair = KeyPair(
                user_id=user_id,
                public_key=public_pem,
                encrypted_private_key=self.cipher.encrypt_field(private_pem),
            )
            await self.uow.key_pairs.create(key_pair)
            await self.uow.commit()

            return Return.ok(KeysRegistered(user_id=user_id, public_key=public_pem))
