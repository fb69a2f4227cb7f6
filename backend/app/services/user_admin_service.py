"""Admin-side account management."""

from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import ResponseMessage
from ..core.exceptions import NotFoundException, ValidationException
from ..models.user import User
from ..repositories.base_repository import Page
from ..repositories.factory import RepositoryFactory
from .base import BaseService


class UserAdminService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def list_users(
        self, *, page: int, limit: int, search: Optional[str] = None, role: Optional[str] = None
    ) -> Page[User]:
        return self.user_repository.list_users(page=page, limit=limit, search=search, role=role)

    def _require(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException(ResponseMessage.not_found("User"))
        return user

    def set_active(self, admin: User, user_id: str, active: bool) -> User:
        """Suspend or reactivate an account. Admins cannot suspend themselves."""
        user = self._require(user_id)
        if not active and user.id == admin.id:
            raise ValidationException("You cannot suspend your own account")
        with self.transaction():
            user.is_active = active
            self.user_repository.flush()
        self.log_operation("set_user_active", user_id=user_id, active=active, admin_id=admin.id)
        return user
