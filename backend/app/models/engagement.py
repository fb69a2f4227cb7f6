"""Buyer feedback on products: star reviews and favorite/upvote reactions."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .user import User


class ProductReview(Base):
    """
    One review per user per product.

    The product's average_rating and total_reviews columns are recomputed
    from this table whenever a review is added.
    """

    __tablename__ = "product_reviews"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    product_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    user: Mapped["User"] = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="unique_product_review"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_review_rating"),
    )

    @property
    def user_name(self) -> Optional[str]:
        return self.user.name if self.user else None


class ProductReaction(Base):
    """A favorite or upvote. The row's presence is the flag."""

    __tablename__ = "product_reactions"

    product_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    kind: Mapped[str] = mapped_column(String(20), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
