"""
Rotate Session Use Case

Exchanges a refresh token for a new access/refresh pair.
"""

import logging
from datetime import UTC, timedelta
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.utils.jwt import TokenCodec, hash_refresh_token
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.base import utcnow
from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return
from .dtos import RotatedSession, TokenPair

logger = logging.getLogger(__name__)

INVALID_REFRESH = Error(ErrorCode.REFRESH_TOKEN_INVALID, "Invalid or expired refresh token")


class RotateSessionUseCase:
    """
    Use case for refresh token rotation.

    Business Rules:
    - Session must be active, unexpired and bound to the presented device
    - Wrong token, wrong device and expiry are reported identically
    - New access token reuses the session's role snapshot (no user re-read)
    - New refresh token and generation id (the new jti) on every rotation
    - Single use: a refresh token is consumed by exactly one rotation
    - All-or-nothing: the new token is verified before the swap; on any
      failure the session is left unchanged
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec):
        self.uow = uow
        self.codec = codec

    async def execute(self, refresh_token: str, device_id: str) -> Result[RotatedSession]:
        """
        Execute rotate session use case.

        Args:
            refresh_token: Refresh token presented by the client
            device_id: Device the session was created on

        Returns:
            Result with the new pair and its claims, or REFRESH_TOKEN_INVALID /
            INTERNAL_ERROR / SERVICE_UNAVAILABLE
        """
        try:
            return await self._rotate(refresh_token, device_id)
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to rotate session"))

    async def _rotate(self, refresh_token: str, device_id: str) -> Result[RotatedSession]:
        async with self.uow:
            now = utcnow()
            old_hash = hash_refresh_token(refresh_token)

            session = await self.uow.sessions.find_active_by_refresh_token(
                old_hash, device_id, now
            )
            if session is None:
                return Return.err(INVALID_REFRESH)

            token_id = uuid4()
            new_access_token = self.codec.issue_access_token(
                session.user_id,
                session.user_type,
                session.admin_role,
                issued_at=now.replace(tzinfo=UTC),
                token_id=token_id,
            )
            new_refresh_token = self.codec.issue_refresh_token()

            verified = self.codec.verify_access_token(new_access_token)
            if verified.is_err():
                logger.error(f"Rotated access token failed verification: {verified.error.code}")
                return Return.err(Error(ErrorCode.INTERNAL_ERROR, "Unable to rotate session"))

            swapped = await self.uow.sessions.rotate_tokens(
                session_id=session.id,
                expected_refresh_token_hash=old_hash,
                access_token=new_access_token,
                refresh_token_hash=hash_refresh_token(new_refresh_token),
                jwt_token_id=token_id,
                expires_at=now + timedelta(seconds=self.codec.access_token_seconds),
                refresh_expires_at=now + timedelta(seconds=self.codec.refresh_token_seconds),
                now=now,
            )
            if not swapped:
                # Another request rotated this refresh token first
                logger.warning(f"Lost rotation race for session {session.id}")
                return Return.err(INVALID_REFRESH)

            await self.uow.commit()
            logger.info(f"Rotated tokens for session {session.id}")

            return Return.ok(
                RotatedSession(
                    tokens=TokenPair(
                        access_token=new_access_token, refresh_token=new_refresh_token
                    ),
                    claims=verified.value,
                )
            )
