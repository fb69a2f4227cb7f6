# backend/app/models/user.py
"""
User model for the Spyke marketplace.

Buyers, sellers and administrators share one account table and are told
apart by the roles list. Every account carries the base "user" role.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ..core.enums import RoleName
from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Account used for authentication and role checks.

    Attributes:
        id: ULID primary key
        name: Display name
        email: Unique email address used for login
        hashed_password: Password hash
        roles: Subset of admin, seller, user
        is_active: Suspended accounts cannot authenticate
        last_login_at: Timestamp of the most recent successful login
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    roles: Mapped[List[str]] = mapped_column(
        JSON, nullable=False, default=lambda: [RoleName.USER.value]
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def has_role(self, role: RoleName | str) -> bool:
        value = role.value if isinstance(role, RoleName) else role
        return value in (self.roles or [])

    @property
    def is_admin(self) -> bool:
        return self.has_role(RoleName.ADMIN)

    @property
    def is_seller(self) -> bool:
        return self.has_role(RoleName.SELLER)

    def __repr__(self) -> str:
        return f"<User {self.email} roles={self.roles}>"
