"""Role checking dependencies."""

from fastapi import Depends

from backend.auth import get_current_user
from backend.models import Role
from backend.models_db import User
from ideaengine.errors import Forbidden


def require_role(required_role: str = Role.ADMIN.value):
    """Return a FastAPI dependency that only admits users holding ``required_role``.

    The role is read from the freshly loaded user row, never from token claims.
    """
    async def _check(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != required_role:
            raise Forbidden(f"{required_role.capitalize()} access required")
        return current_user
    return _check


def is_admin(user: User) -> bool:
    return user.role == Role.ADMIN.value
