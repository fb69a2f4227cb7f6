# backend/app/api/dependencies/auth.py
"""
Authentication dependencies.

User lookups run in a worker thread so the sync ORM never blocks the
event loop.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_current_user_id, get_current_user_id_optional
from ...core.constants import ResponseMessage
from ...database import get_db
from ...models.user import User
from ...repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def _load_user(db: Session, user_id: str) -> Optional[User]:
    return UserRepository(db).get_by_id(user_id)


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user or fail with 401."""
    user = await asyncio.to_thread(_load_user, db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ResponseMessage.TOKEN_INVALID,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ResponseMessage.ACCOUNT_DEACTIVATED,
        )
    return user


async def get_current_user_optional(
    user_id: Optional[str] = Depends(get_current_user_id_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous or unknown callers resolve to None."""
    if not user_id:
        return None
    user = await asyncio.to_thread(_load_user, db, user_id)
    if user is None or not user.is_active:
        return None
    return user
