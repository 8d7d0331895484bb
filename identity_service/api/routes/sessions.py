from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from identity_service.api.error import server_error
from identity_service.api.utils.admin_auth import verify_admin_api_key
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.auth import AuthenticatedIdentity
from identity_service.app.use_cases.sessions import (
    InvalidateSessionUseCase,
    SweepExpiredSessionsUseCase,
    SweepResult,
)
from identity_service.depends import get_unit_of_work, require_roles
from identity_service.domain.entities import AdminRole

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class RevokeSessionResponse(BaseModel):
    """Response for session revocation operations"""

    message: str
    revoked_count: int


@router.post(
    "/revoke-user/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_user_sessions(
    user_id: int,
    current_user: AuthenticatedIdentity = Depends(
        require_roles(AdminRole.manager.value, AdminRole.admin.value)
    ),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke All Sessions of a User

    Deactivates every active session for the user (forces re-login, which
    also picks up role changes).

    Authorization:
    - admin_role must be manager or admin

    Raises:
        - 401 Unauthorized / 403 Forbidden: Authentication or role check failed
        - 500 Internal Server Error: Server error
    """
    use_case = InvalidateSessionUseCase(uow)
    result = await use_case.invalidate_all_for_user(user_id)

    if result.is_err():
        raise server_error(result.error)

    data = result.value
    return {
        "message": f"Successfully revoked {data['revoked_count']} session(s)",
        "revoked_count": data["revoked_count"],
    }


@router.post(
    "/sweep",
    status_code=status.HTTP_200_OK,
    response_model=SweepResult,
    dependencies=[Depends(verify_admin_api_key)],
)
async def sweep_expired_sessions(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Sweep Expired Sessions

    Deactivates sessions whose refresh token has expired. Meant to be called
    periodically by an external scheduler with the admin API key.
    """
    use_case = SweepExpiredSessionsUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise server_error(result.error)

    return result.value
