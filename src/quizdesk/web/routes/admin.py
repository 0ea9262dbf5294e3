"""User administration endpoints."""

from fastapi import APIRouter, Depends

from quizdesk.core import admin
from quizdesk.core.accounts import UserContext
from quizdesk.web.deps import require_admin
from quizdesk.web.schemas import (
    AdminUserListResponse,
    AdminUserResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@router.get("", response_model=AdminUserListResponse)
async def list_users(_: UserContext = Depends(require_admin)) -> AdminUserListResponse:
    """Pending and verified users, newest first."""
    pending, verified = admin.list_users()
    return AdminUserListResponse(
        pending=[AdminUserResponse.model_validate(u) for u in pending],
        verified=[AdminUserResponse.model_validate(u) for u in verified],
    )


@router.post("/{user_id}/approve", response_model=SuccessResponse)
async def approve_user(user_id: str, _: UserContext = Depends(require_admin)) -> SuccessResponse:
    admin.approve_user(user_id)
    return SuccessResponse()


@router.post("/{user_id}/revoke", response_model=SuccessResponse)
async def revoke_access(user_id: str, _: UserContext = Depends(require_admin)) -> SuccessResponse:
    admin.revoke_access(user_id)
    return SuccessResponse()


@router.post("/{user_id}/reject", response_model=SuccessResponse)
async def reject_user(user_id: str, _: UserContext = Depends(require_admin)) -> SuccessResponse:
    admin.reject_user(user_id)
    return SuccessResponse()


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(user_id: str, requester: UserContext = Depends(require_admin)) -> SuccessResponse:
    """Delete a user with all dependent rows."""
    admin.delete_user(requester, user_id)
    return SuccessResponse()
