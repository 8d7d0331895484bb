from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from identity_service.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from identity_service.api.error import ClientError, server_error
from identity_service.api.utils.encryption import FieldCipher
from identity_service.api.utils.jwt import TokenCodec
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.auth import (
    AuthenticatedIdentity,
    AuthenticateUseCase,
    require_role,
)
from identity_service.domain.entities import ErrorCode


def _engine_options(db_uri: str) -> dict:
    # SQLite engines use a pool without size/timeout settings
    if db_uri.startswith("sqlite"):
        return {}
    return {
        "pool_size": ApplicationConfig.DB_POOL_SIZE,
        "pool_timeout": ApplicationConfig.DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    ApplicationConfig.DB_URI, echo=False, future=True, **_engine_options(ApplicationConfig.DB_URI)
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

UNAUTHORIZED_CODES = (
    ErrorCode.NO_ACCESS_TOKEN,
    ErrorCode.TOKEN_EXPIRED_NO_REFRESH,
    ErrorCode.REFRESH_TOKEN_INVALID,
    ErrorCode.SESSION_INVALID,
)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec.from_config(ApplicationConfig)


@lru_cache
def get_field_cipher() -> FieldCipher:
    return FieldCipher.from_secret(ApplicationConfig.ENCRYPTION_KEY)


async def _body_field(request: Request, name: str) -> Optional[str]:
    """Read a string field from a JSON body, if there is one"""
    try:
        body = await request.json()
    except (ValueError, UnicodeDecodeError):
        return None
    if isinstance(body, dict) and isinstance(body.get(name), str):
        return body[name]
    return None


async def get_current_user(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_refresh_token: Optional[str] = Header(None),
    x_device_id: Optional[str] = Header(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
) -> AuthenticatedIdentity:
    """
    Dependency running the authentication gate for protected routes.

    Reads the bearer token, plus the refresh token (x-refresh-token header or
    body "refreshToken") and device id (x-device-id header or body
    "device_id"). When the gate rotated the session, the new pair is returned
    in the x-access-token / x-refresh-token response headers.

    Raises:
        ClientError: 401 for missing/expired credentials or invalid session,
                     403 for an invalid access token
        ServerError: storage or crypto fault
    """
    access_token = credentials.credentials.strip() if credentials else None
    refresh_token = x_refresh_token or await _body_field(request, "refreshToken")
    device_id = x_device_id or await _body_field(request, "device_id")

    use_case = AuthenticateUseCase(uow, codec)
    result = await use_case.execute(access_token, refresh_token, device_id)

    if result.is_err():
        error = result.error
        if error.code in UNAUTHORIZED_CODES:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ErrorCode.ACCESS_TOKEN_INVALID:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise server_error(error)

    identity = result.value
    if identity.new_tokens is not None:
        response.headers["x-access-token"] = identity.new_tokens.access_token
        response.headers["x-refresh-token"] = identity.new_tokens.refresh_token

    return identity


def require_roles(*allowed_roles: str):
    """Build a dependency that allows only the given admin roles"""

    async def dependency(
        identity: AuthenticatedIdentity = Depends(get_current_user),
    ) -> AuthenticatedIdentity:
        result = require_role(identity, allowed_roles)
        if result.is_err():
            raise ClientError(result.error, status_code=status.HTTP_403_FORBIDDEN)
        return result.value

    return dependency
