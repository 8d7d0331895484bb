from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from identity_service.api.error import server_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.auth import AuthenticatedIdentity
from identity_service.app.use_cases.sessions import InvalidateSessionUseCase
from identity_service.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/auth", tags=["Authentication"])


class MeResponse(BaseModel):
    """Resolved identity of the caller"""

    user_id: int
    user_type: str
    admin_role: Optional[str]
    token_rotated: bool


class LogoutResponse(BaseModel):
    message: str


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def get_me(current_user: AuthenticatedIdentity = Depends(get_current_user)):
    """
    Current Identity

    Returns the identity resolved by the authentication gate. When the access
    token had expired and was rotated, the new pair is in the x-access-token
    and x-refresh-token response headers.

    Raises:
        - 401 Unauthorized: Missing token, expired without refresh, invalid refresh, invalid session
        - 403 Forbidden: Invalid access token
    """
    return MeResponse(
        user_id=current_user.user_id,
        user_type=current_user.user_type,
        admin_role=current_user.admin_role,
        token_rotated=current_user.token_rotated,
    )


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    current_user: AuthenticatedIdentity = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Deactivates the session holding the caller's (possibly just rotated)
    access token.
    """
    use_case = InvalidateSessionUseCase(uow)
    result = await use_case.invalidate(current_user.access_token)

    if result.is_err():
        raise server_error(result.error)

    return LogoutResponse(message="Logged out successfully")
