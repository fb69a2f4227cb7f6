# backend/app/services/auth_service.py
"""
Authentication Service for the Spyke marketplace.

Handles registration, credential checks and token issuance.
"""

from datetime import timedelta
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from ..auth import create_access_token, get_password_hash, verify_password
from ..core.config import settings
from ..core.constants import ResponseMessage
from ..core.enums import RoleName
from ..core.exceptions import ConflictException, UnauthorizedException
from ..core.timezone_utils import utc_now
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("register")
    def register(self, name: str, email: str, password: str, become_seller: bool = False) -> User:
        """
        Create an account with the base user role.

        Raises:
            ConflictException: If the email is already registered
        """
        if self.user_repository.email_exists(email):
            raise ConflictException(ResponseMessage.already_exists("User"), code="EMAIL_TAKEN")

        roles = [RoleName.USER.value]
        if become_seller:
            roles.append(RoleName.SELLER.value)

        with self.transaction():
            user = self.user_repository.create(
                name=name,
                email=email.strip().lower(),
                hashed_password=get_password_hash(password),
                roles=roles,
            )
        self.log_operation("register", user_id=user.id)
        return user

    @BaseService.measure_operation("authenticate")
    def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue an access token.

        Raises:
            UnauthorizedException: Unknown email, wrong password or suspended account
        """
        user = self.user_repository.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            raise UnauthorizedException(ResponseMessage.LOGIN_FAILED, code="INVALID_CREDENTIALS")
        if not user.is_active:
            raise UnauthorizedException(ResponseMessage.ACCOUNT_DEACTIVATED, code="ACCOUNT_DEACTIVATED")

        with self.transaction():
            user.last_login_at = utc_now()
            self.user_repository.flush()

        expires = timedelta(minutes=settings.access_token_expire_minutes)
        token = create_access_token({"sub": user.id, "roles": user.roles}, expires_delta=expires)
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": int(expires.total_seconds()),
            "user": user,
        }
