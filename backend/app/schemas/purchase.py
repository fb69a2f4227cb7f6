"""Schemas for the cart, checkout and purchase history."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..core.enums import OrderStatus, PaymentStatus, ProductType
from .base import CamelModel, PaginationMeta, RequestModel


class AddToCartRequest(RequestModel):
    product_id: str


class ApplyPromocodeRequest(RequestModel):
    code: str = Field(..., min_length=1, max_length=20)


class CheckoutRequest(RequestModel):
    payment_method: str = Field("manual", max_length=30)
    payment_reference: Optional[str] = Field(None, max_length=100)


class RefundRequest(RequestModel):
    amount: Optional[float] = Field(None, ge=0)
    reason: Optional[str] = Field(None, max_length=500)


class ProductSummary(CamelModel):
    id: str
    title: str
    slug: str
    thumbnail: Optional[str] = None
    type: ProductType
    price: float
    currency: str
    seller_id: str


class CartItemResponse(CamelModel):
    product_id: str
    product: Optional[ProductSummary] = None
    added_at: Optional[datetime] = None


class AppliedPromocode(CamelModel):
    code: str
    discount_amount: float
    discount_percentage: Optional[float] = None


class CartResponse(CamelModel):
    id: str
    items: List[CartItemResponse]
    total_items: int
    total_amount: float
    final_amount: float
    applied_promocode: Optional[AppliedPromocode] = None

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        applied = None
        if cart.promocode_code:
            applied = AppliedPromocode(
                code=cart.promocode_code,
                discount_amount=cart.promocode_discount_amount or 0.0,
                discount_percentage=cart.promocode_discount_percentage,
            )
        return cls(
            id=cart.id,
            items=[CartItemResponse.model_validate(item) for item in cart.items],
            total_items=cart.total_items,
            total_amount=cart.total_amount,
            final_amount=cart.final_amount,
            applied_promocode=applied,
        )


class PurchaseItemResponse(CamelModel):
    product_id: str
    seller_id: str
    price: float
    access_granted: bool
    access_granted_at: Optional[datetime] = None
    product: Optional[ProductSummary] = None


class PurchaseResponse(CamelModel):
    id: str
    items: List[PurchaseItemResponse]
    total_amount: float
    discount_amount: float
    final_amount: float
    currency: str
    promocode_code: Optional[str] = None
    payment_method: str
    payment_status: PaymentStatus
    order_status: OrderStatus
    purchase_date: datetime
    completed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_amount: Optional[float] = None
    refund_reason: Optional[str] = None


class PurchaseListResponse(CamelModel):
    purchases: List[PurchaseResponse]
    pagination: PaginationMeta


class ProductAccessResponse(CamelModel):
    product_id: str
    title: str
    type: ProductType
    current_version: str
    premium_content: Dict[str, Any] = Field(default_factory=dict)
    access_granted_at: Optional[datetime] = None
