"""
Authenticate Use Case

Request-time gate: verifies the access token, rotates the session when the
access token has expired, and confirms the session row.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.utils.jwt import AccessClaims, TokenCodec
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.sessions import RotateSessionUseCase, TokenPair
from identity_service.domain.base import utcnow
from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return
from .dtos import AuthenticatedIdentity

logger = logging.getLogger(__name__)


class AuthenticateUseCase:
    """
    Use case for authenticating a protected request.

    Flow:
    1. No access token                    -> NO_ACCESS_TOKEN
    2. Verify token
       - valid                            -> session check
       - bad signature / malformed        -> ACCESS_TOKEN_INVALID
       - expired                          -> refresh attempt
    3. Refresh attempt
       - refresh token or device missing  -> TOKEN_EXPIRED_NO_REFRESH
       - rotation fails                   -> REFRESH_TOKEN_INVALID
       - rotation succeeds                -> authenticated with the new pair
    4. Session check (unrotated tokens only): an active, unexpired row must
       hold the exact token, otherwise SESSION_INVALID; on success
       last_activity is touched

    Rotation swaps the pair, the expiry and last_activity in one committed
    update guarded by the active flag, so it doubles as the session check.
    Once it commits, the new pair is always handed back.
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec):
        self.uow = uow
        self.codec = codec

    async def execute(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str] = None,
        device_id: Optional[str] = None,
    ) -> Result[AuthenticatedIdentity]:
        """
        Execute authentication.

        Args:
            access_token: Bearer token from the Authorization header
            refresh_token: Refresh token, needed only when the access token expired
            device_id: Device id, needed only when the access token expired

        Returns:
            Result with AuthenticatedIdentity (carrying the new token pair when
            rotation happened), or an authentication Error
        """
        if not access_token:
            return Return.err(Error(ErrorCode.NO_ACCESS_TOKEN, "Access token required"))

        verified = self.codec.verify_access_token(access_token)
        active_token = access_token
        new_tokens: Optional[TokenPair] = None

        if verified.is_err():
            if verified.error.code != ErrorCode.TOKEN_EXPIRED:
                return Return.err(
                    Error(ErrorCode.ACCESS_TOKEN_INVALID, "Invalid access token")
                )

            if not refresh_token or not device_id:
                return Return.err(
                    Error(
                        ErrorCode.TOKEN_EXPIRED_NO_REFRESH,
                        "Access token expired, refresh token and device ID required",
                    )
                )

            rotation = await RotateSessionUseCase(self.uow, self.codec).execute(
                refresh_token, device_id
            )
            if rotation.is_err():
                return Return.err(rotation.error)

            new_tokens = rotation.value.tokens
            active_token = new_tokens.access_token
            claims: AccessClaims = rotation.value.claims
        else:
            # Rotation already matched the active row, so only unrotated tokens need the lookup
            try:
                session_result = await self._check_session(active_token)
            except SQLAlchemyError as exc:
                return Return.err(storage_error(exc, "Session check failed"))
            if session_result.is_err():
                return session_result
            claims = verified.value

        if new_tokens is not None:
            logger.info(f"Token rotated during authentication for user {claims.user_id}")

        return Return.ok(
            AuthenticatedIdentity(
                user_id=claims.user_id,
                user_type=claims.user_type,
                admin_role=claims.admin_role,
                access_token=active_token,
                token_rotated=new_tokens is not None,
                new_tokens=new_tokens,
            )
        )

    async def _check_session(self, access_token: str) -> Result[None]:
        async with self.uow:
            now = utcnow()
            session = await self.uow.sessions.find_active_by_access_token(access_token, now)
            if session is None:
                return Return.err(
                    Error(ErrorCode.SESSION_INVALID, "Invalid or expired session")
                )

            await self.uow.sessions.touch(access_token, now)
            await self.uow.commit()
            return Return.ok(None)
