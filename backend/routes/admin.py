"""Admin routes — platform analytics and role management."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.database import get_db
from backend.middleware.role_check import require_role
from backend.models import AnalyticsResponse, Role, RoleUpdateRequest, UserResponse
from backend.models_db import User
from backend.services.accounts import assign_role
from backend.services.analytics import platform_analytics

router = APIRouter()


@router.get("/admin/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    admin: User = Depends(require_role(Role.ADMIN.value)),
    db: Session = Depends(get_db),
):
    """Users by role, ideas by phase, accepted collaborations and total likes."""
    return AnalyticsResponse.model_validate(platform_analytics(db))


@router.put("/admin/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    body: RoleUpdateRequest,
    admin: User = Depends(require_role(Role.ADMIN.value)),
    db: Session = Depends(get_db),
):
    """Grant a role to a user."""
    user = assign_role(db, user_id, body.role.value)
    return UserResponse(id=user.id, name=user.name, email=user.email, role=user.role)
