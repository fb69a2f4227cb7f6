"""
Taxonomy models: categories, industries and tools.

The three resources share one shape. Names are unique across the whole
table, including soft-deleted rows, by their case-folded name_key. Duplicate
checks in the service layer only consider live rows. Soft-deleted rows are hidden from every read.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from ..core.constants import (
    DEFAULT_CATEGORY_ICON,
    DEFAULT_INDUSTRY_ICON,
    DEFAULT_TOOL_ICON,
    TAXONOMY_NAME_MAX_LENGTH,
)
from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base


def name_key_for(name: str) -> str:
    """Unicode-aware comparison key: "Ärzte", " ÄRZTE " and "ärzte" collide."""
    return name.strip().casefold()


class TaxonomyMixin:
    """Columns and lifecycle helpers shared by every taxonomy table."""

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(TAXONOMY_NAME_MAX_LENGTH), nullable=False, index=True)
    name_key: Mapped[str] = mapped_column(
        String(TAXONOMY_NAME_MAX_LENGTH), unique=True, nullable=False, index=True
    )
    icon: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    product_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @validates("name")
    def _sync_name_key(self, key: str, value: str) -> str:
        self.name_key = name_key_for(value)
        return value

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.is_active = False
        self.deleted_at = utc_now()

    def restore(self) -> None:
        self.is_deleted = False
        self.is_active = True
        self.deleted_at = None
        self.name_key = name_key_for(self.name)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r} active={self.is_active}>"


class Category(TaxonomyMixin, Base):
    __tablename__ = "categories"

    default_icon = DEFAULT_CATEGORY_ICON

    def __init__(self, **kwargs):
        kwargs.setdefault("icon", DEFAULT_CATEGORY_ICON)
        super().__init__(**kwargs)


class Industry(TaxonomyMixin, Base):
    __tablename__ = "industries"

    default_icon = DEFAULT_INDUSTRY_ICON

    def __init__(self, **kwargs):
        kwargs.setdefault("icon", DEFAULT_INDUSTRY_ICON)
        super().__init__(**kwargs)


class Tool(TaxonomyMixin, Base):
    __tablename__ = "tools"

    default_icon = DEFAULT_TOOL_ICON

    description: Mapped[Optional[str]] = mapped_column(Text)

    def __init__(self, **kwargs):
        kwargs.setdefault("icon", DEFAULT_TOOL_ICON)
        super().__init__(**kwargs)
