# backend/app/api/dependencies/authz.py
"""Role based authorization dependencies."""

from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, status

from ...core.constants import ResponseMessage
from ...core.enums import RoleName
from ...models.user import User
from .auth import get_current_user

PermissionDependency = Callable[..., Awaitable[User]]


def require_roles(*roles: RoleName | str) -> PermissionDependency:
    """Ensure the current user possesses at least one of the provided roles."""

    required = {(role.value if isinstance(role, RoleName) else role).lower() for role in roles}

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        user_roles = {role.lower() for role in (current_user.roles or [])}
        if not required.intersection(user_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ResponseMessage.FORBIDDEN,
            )
        return current_user

    return checker


require_admin = require_roles(RoleName.ADMIN)
require_seller_or_admin = require_roles(RoleName.SELLER, RoleName.ADMIN)
