"""
Create Session Use Case

Persists a new session for freshly issued tokens.
"""

from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.utils.jwt import TokenCodec, hash_refresh_token
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.base import utcnow
from identity_service.domain.entities import ErrorCode, Session
from identity_service.libs.result import Error, Result, Return
from .dtos import SessionCreated


class CreateSessionUseCase:
    """
    Use case for storing a session after login/registration.

    Business Rules:
    - User must exist; its user_type/admin_role are snapshotted onto the row
    - Access token must carry a jti; it becomes the session's jwt_token_id
    - Access and refresh expiries are computed from the configured lifetimes
    - last_activity starts at creation time
    - Refresh token is stored as a SHA-256 hash
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec):
        self.uow = uow
        self.codec = codec

    async def execute(
        self,
        user_id: int,
        access_token: str,
        refresh_token: str,
        device_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[SessionCreated]:
        """
        Execute create session use case in its own transaction.

        Returns:
            Result with SessionCreated, or USER_NOT_FOUND / TOKEN_INVALID
        """
        try:
            async with self.uow:
                result = await self.stage(
                    user_id, access_token, refresh_token, device_id, ip_address, user_agent
                )
                if result.is_err():
                    return result

                await self.uow.commit()
                return result
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to create session"))

    async def stage(
        self,
        user_id: int,
        access_token: str,
        refresh_token: str,
        device_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[SessionCreated]:
        """
        Add the session to the caller's open transaction without committing.

        Used by use cases that create a session together with other rows.
        """
        token_id = self.codec.read_token_id(access_token)
        if token_id is None:
            return Return.err(Error(ErrorCode.TOKEN_INVALID, "Access token has no token id"))

        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

        now = utcnow()
        session = Session(
            user_id=user.id,
            access_token=access_token,
            refresh_token_hash=hash_refresh_token(refresh_token),
            jwt_token_id=token_id,
            device_id=device_id,
            ip_address=ip_address,
            user_agent=user_agent,
            user_type=user.user_type,
            admin_role=user.admin_role,
            is_active=True,
            created_at=now,
            last_activity=now,
            expires_at=now + timedelta(seconds=self.codec.access_token_seconds),
            refresh_expires_at=now + timedelta(seconds=self.codec.refresh_token_seconds),
        )
        session = await self.uow.sessions.create(session)

        return Return.ok(
            SessionCreated(
                session_id=str(session.id),
                user_id=user.id,
                user_type=session.user_type,
                admin_role=session.admin_role,
                access_token=access_token,
                refresh_token=refresh_token,
            )
        )
