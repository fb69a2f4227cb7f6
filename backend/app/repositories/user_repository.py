# backend/app/repositories/user_repository.py
"""
User Repository for the Spyke marketplace.

Handles account lookups for authentication and the admin user listing.
"""

import logging
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository, Page

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup."""
        return self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def list_users(
        self,
        *,
        page: int,
        limit: int,
        search: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Page[User]:
        query = self.db.query(User)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern))
            )
        users = query.order_by(User.created_at.desc(), User.id.asc())
        if not role:
            return self._paginate(users, page, limit)

        # roles live in a JSON list, so role filtering happens after the fetch
        matching = [user for user in users.all() if user.has_role(role)]
        start = (page - 1) * limit
        return Page(items=matching[start : start + limit], total=len(matching), page=page, limit=limit)
