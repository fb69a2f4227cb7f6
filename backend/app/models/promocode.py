"""Promocode and usage history models."""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.constants import PROMOCODE_DESCRIPTION_MAX_LENGTH, PROMOCODE_MAX_LENGTH
from ..core.enums import DiscountType
from ..core.timezone_utils import ensure_utc, utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base


class PromocodeUsage(Base):
    __tablename__ = "promocode_usages"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    promocode_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("promocodes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    purchase_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("purchases.id"))
    discount_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    used_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Promocode(Base):
    """
    Discount code created by an admin (optionally global) or a seller.

    Restriction lists hold product, category and industry ids. An empty list
    places no restriction on that dimension; a global code ignores all three.
    """

    __tablename__ = "promocodes"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    code: Mapped[str] = mapped_column(
        String(PROMOCODE_MAX_LENGTH), unique=True, nullable=False, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(String(PROMOCODE_DESCRIPTION_MAX_LENGTH))

    created_by: Mapped[str] = mapped_column(String(26), ForeignKey("users.id"), nullable=False)
    created_by_type: Mapped[str] = mapped_column(String(10), nullable=False)
    seller_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("users.id"), index=True)

    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[float] = mapped_column(Float, nullable=False)
    max_discount_amount: Mapped[Optional[float]] = mapped_column(Float)
    minimum_order_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    applicable_products: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    applicable_categories: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    applicable_industries: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_global: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    usage_limit: Mapped[Optional[int]] = mapped_column(Integer)
    usage_limit_per_user: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    valid_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    usage_history: Mapped[List[PromocodeUsage]] = relationship(
        PromocodeUsage,
        cascade="all, delete-orphan",
        order_by=PromocodeUsage.used_at,
        lazy="selectin",
    )

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return (
            bool(self.is_active)
            and ensure_utc(self.valid_from) <= now <= ensure_utc(self.valid_until)
            and (self.usage_limit is None or self.current_usage_count < self.usage_limit)
        )

    def usage_count_for(self, user_id: str) -> int:
        return sum(1 for usage in self.usage_history if usage.user_id == user_id)

    def can_be_used_by(self, user_id: str) -> bool:
        if not self.is_valid():
            return False
        return self.usage_count_for(user_id) < self.usage_limit_per_user

    def is_applicable_to_products(self, product_ids: Iterable[str]) -> bool:
        if self.is_global or not self.applicable_products:
            return True
        allowed = set(self.applicable_products)
        return any(product_id in allowed for product_id in product_ids)

    def is_applicable_to_categories(self, category_ids: Iterable[Optional[str]]) -> bool:
        if self.is_global or not self.applicable_categories:
            return True
        allowed = set(self.applicable_categories)
        return any(category_id in allowed for category_id in category_ids if category_id)

    def is_applicable_to_industries(self, industry_ids: Iterable[Optional[str]]) -> bool:
        if self.is_global or not self.applicable_industries:
            return True
        allowed = set(self.applicable_industries)
        return any(industry_id in allowed for industry_id in industry_ids if industry_id)

    def calculate_discount(self, order_amount: float) -> float:
        """Discount for an order total, rounded to cents. Zero under the minimum order."""
        if order_amount < (self.minimum_order_amount or 0):
            return 0.0

        discount = 0.0
        if self.discount_type == DiscountType.PERCENTAGE.value:
            discount = order_amount * self.discount_value / 100
            if self.max_discount_amount and discount > self.max_discount_amount:
                discount = self.max_discount_amount
        elif self.discount_type == DiscountType.FIXED.value:
            discount = min(self.discount_value, order_amount)

        return round(discount, 2)

    def record_usage(self, user_id: str, purchase_id: Optional[str], discount_amount: float) -> None:
        self.usage_history.append(
            PromocodeUsage(user_id=user_id, purchase_id=purchase_id, discount_amount=discount_amount)
        )
        self.current_usage_count = (self.current_usage_count or 0) + 1

    def __repr__(self) -> str:
        return f"<Promocode {self.code} {self.discount_type}={self.discount_value}>"
