"""
Register User Use Case

Creates the user profile and its first session in one transaction.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from identity_service.api.utils.encryption import FieldCipher
from identity_service.api.utils.jwt import TokenCodec
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.sessions import CreateSessionUseCase
from identity_service.domain.entities import AdminRole, ErrorCode, User, UserType
from identity_service.libs.result import Error, Result, Return
from .register_user_dto import RegisterUserCommand, RegisterUserResponse, TokenExpiry

USER_EXISTS = Error(ErrorCode.USER_ALREADY_EXISTS, "User profile already exists")


class RegisterUserUseCase:
    """
    Register User Use Case

    Business Logic:
    1. Reject ids that already have a profile
    2. Encrypt email and phone with the field cipher
    3. Create User with user_type=voter, admin_role=analyst
    4. Issue access token from the new role snapshot plus a refresh token
    5. Create the session (same transaction)
    6. Commit and return decrypted contact fields with the token pair
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec, cipher: FieldCipher):
        self.uow = uow
        self.codec = codec
        self.cipher = cipher

    async def execute(
        self, command: RegisterUserCommand, token_expiry: TokenExpiry
    ) -> Result[RegisterUserResponse]:
        try:
            return await self._register(command, token_expiry)
        except IntegrityError:
            # Same id registered concurrently
            return Return.err(USER_EXISTS)
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to register user"))

    async def _register(
        self, command: RegisterUserCommand, token_expiry: TokenExpiry
    ) -> Result[RegisterUserResponse]:
        async with self.uow:
            existing_user = await self.uow.users.get_by_id(command.user_id)
            if existing_user:
                return Return.err(USER_EXISTS)

            user = User(
                id=command.user_id,
                email=self.cipher.encrypt_field(command.email),
                phone=self.cipher.encrypt_field(command.phone),
                user_type=UserType.voter.value,
                admin_role=AdminRole.analyst.value,
            )
            user = await self.uow.users.create(user)

            access_token = self.codec.issue_access_token(
                user.id, user.user_type, user.admin_role
            )
            refresh_token = self.codec.issue_refresh_token()

            session_result = await CreateSessionUseCase(self.uow, self.codec).stage(
                user.id,
                access_token,
                refresh_token,
                device_id=command.device_id,
                ip_address=command.ip_address,
                user_agent=command.user_agent,
            )
            if session_result.is_err():
                return session_result

            await self.uow.commit()

            return Return.ok(
                RegisterUserResponse(
                    user_id=user.id,
                    user_type=user.user_type,
                    admin_role=user.admin_role,
                    email=self.cipher.decrypt_field(user.email),
                    phone=self.cipher.decrypt_field(user.phone),
                    session_id=session_result.value.session_id,
                    access_token=access_token,
                    refresh_token=refresh_token,
                    token_expiry=token_expiry,
                )
            )
