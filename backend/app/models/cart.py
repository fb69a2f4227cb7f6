"""Shopping cart models. One cart per user."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .product import Product


class CartItem(Base):
    __tablename__ = "cart_items"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    cart_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    product: Mapped["Product"] = relationship("Product", lazy="joined")

    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="unique_cart_product"),)


class Cart(Base):
    """
    A user's cart with its running totals.

    The applied promocode is denormalized onto the cart; totals are
    recomputed by the purchase service whenever items change.
    """

    __tablename__ = "carts"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    final_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    promocode_code: Mapped[Optional[str]] = mapped_column(String(20))
    promocode_discount_amount: Mapped[Optional[float]] = mapped_column(Float)
    promocode_discount_percentage: Mapped[Optional[float]] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    items: Mapped[List[CartItem]] = relationship(
        CartItem, cascade="all, delete-orphan", order_by=CartItem.added_at, lazy="selectin"
    )

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def product_ids(self) -> List[str]:
        return [item.product_id for item in self.items]

    def has_product(self, product_id: str) -> bool:
        return product_id in self.product_ids

    def clear_promocode(self) -> None:
        self.promocode_code = None
        self.promocode_discount_amount = None
        self.promocode_discount_percentage = None
