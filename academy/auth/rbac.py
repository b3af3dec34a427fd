from typing import Iterable

from fastapi import Depends, HTTPException, status

from academy.auth.dependencies import get_current_user
from academy.auth.schemas import CurrentUser
from academy.core.enums import UserRole

ELEVATED_ROLES = frozenset({UserRole.SUPERADMIN, UserRole.ADMIN})


def role_can_bypass_assignment(role: UserRole) -> bool:
    """Elevated roles act on any batch without a faculty assignment."""
    return role in ELEVATED_ROLES


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example:
        Depends(require_roles(UserRole.FACULTY, UserRole.ADMIN))
    """
    allowed: Iterable[UserRole] = frozenset(roles)

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _checker
