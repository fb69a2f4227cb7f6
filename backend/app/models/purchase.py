"""Purchase (order) models."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import OrderStatus, PaymentStatus
from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .product import Product


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    purchase_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("products.id"), nullable=False, index=True
    )
    seller_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    access_granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    access_granted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    product: Mapped["Product"] = relationship("Product", lazy="joined")


class Purchase(Base):
    """An order placed from a cart. Access is granted once payment completes."""

    __tablename__ = "purchases"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id"), nullable=False, index=True
    )
    order_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.PENDING.value, index=True
    )
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True
    )
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    discount_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    final_amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    promocode_code: Mapped[Optional[str]] = mapped_column(String(20))
    payment_method: Mapped[str] = mapped_column(String(30), nullable=False, default="manual")
    payment_reference: Mapped[Optional[str]] = mapped_column(String(100))
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    user_agent: Mapped[Optional[str]] = mapped_column(String(500))

    purchase_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    refunded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    refund_reason: Mapped[Optional[str]] = mapped_column(String(500))
    refund_amount: Mapped[Optional[float]] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    items: Mapped[List[PurchaseItem]] = relationship(
        PurchaseItem, cascade="all, delete-orphan", lazy="selectin"
    )

    def grant_access(self) -> None:
        now = utc_now()
        for item in self.items:
            if not item.access_granted:
                item.access_granted = True
                item.access_granted_at = now
        self.order_status = OrderStatus.COMPLETED.value
        self.payment_status = PaymentStatus.COMPLETED.value
        self.completed_at = now

    def process_refund(self, amount: Optional[float], reason: Optional[str]) -> None:
        self.refund_amount = amount if amount is not None else self.final_amount
        self.refund_reason = reason
        self.refunded_at = utc_now()
        self.payment_status = PaymentStatus.REFUNDED.value
        self.order_status = OrderStatus.REFUNDED.value
        for item in self.items:
            item.access_granted = False
