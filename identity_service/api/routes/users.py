from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from identity_service.api.error import ClientError, server_error
from identity_service.api.utils.encryption import FieldCipher
from identity_service.api.utils.jwt import TokenCodec
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.auth import AuthenticatedIdentity, require_self_or_role
from identity_service.app.use_cases.users import (
    GetUserUseCase,
    RegisterUserCommand,
    RegisterUserResponse,
    RegisterUserUseCase,
    TokenExpiry,
    UserProfile,
)
from identity_service.depends import (
    get_current_user,
    get_field_cipher,
    get_token_codec,
    get_unit_of_work,
)
from identity_service.domain.entities import AdminRole, ErrorCode

router = APIRouter(prefix="/users", tags=["Users"])

PROFILE_READER_ROLES = (AdminRole.manager, AdminRole.admin, AdminRole.moderator)


class RegisterUserRequest(BaseModel):
    """
    Register user HTTP request payload

    user_id is issued by the upstream auth service.
    """

    user_id: int = Field(..., gt=0, description="User id from the auth service")
    email: Optional[EmailStr] = Field(None, description="Contact email (stored encrypted)")
    phone: Optional[str] = Field(None, max_length=32, description="Contact phone (stored encrypted)")
    device_id: Optional[str] = Field(None, max_length=255, description="Device binding for refresh")
    ip_address: Optional[str] = Field(None, max_length=64)
    user_agent: Optional[str] = Field(None, max_length=512)


@router.post(
    "", status_code=status.HTTP_201_CREATED, response_model=RegisterUserResponse
)
async def register_user(
    payload: RegisterUserRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
    cipher: FieldCipher = Depends(get_field_cipher),
):
    """
    Register User Profile

    Creates the profile for an auth-service user and opens the first session.
    Returns the access/refresh token pair and the configured lifetimes.

    Raises:
        - 409 Conflict: Profile already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
        - 500 Internal Server Error: Server error
    """
    command = RegisterUserCommand(
        user_id=payload.user_id,
        email=payload.email,
        phone=payload.phone,
        device_id=payload.device_id,
        ip_address=payload.ip_address or (request.client.host if request.client else None),
        user_agent=payload.user_agent or request.headers.get("user-agent"),
    )
    token_expiry = TokenExpiry(
        access_token=ApplicationConfig.ACCESS_TOKEN_EXPIRY,
        refresh_token=ApplicationConfig.REFRESH_TOKEN_EXPIRY,
    )

    use_case = RegisterUserUseCase(uow, codec, cipher)
    result = await use_case.execute(command, token_expiry)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.USER_ALREADY_EXISTS:
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise server_error(error)

    return result.value


@router.get("/{user_id}", status_code=status.HTTP_200_OK, response_model=UserProfile)
async def get_user(
    user_id: int,
    current_user: AuthenticatedIdentity = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cipher: FieldCipher = Depends(get_field_cipher),
):
    """
    Get User Profile

    Authorization:
    - The user themself, or admin_role manager, admin or moderator

    Raises:
        - 401 Unauthorized / 403 Forbidden: Authentication or role check failed
        - 404 Not Found: User not found
    """
    allowed = require_self_or_role(current_user, user_id, PROFILE_READER_ROLES)
    if allowed.is_err():
        raise ClientError(allowed.error, status_code=status.HTTP_403_FORBIDDEN)

    result = await GetUserUseCase(uow, cipher).execute(user_id)

    if result.is_err():
        error = result.error
        if error.code == ErrorCode.USER_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise server_error(error)

    return result.value
