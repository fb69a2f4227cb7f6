"""Schemas for promocodes."""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints, field_validator

from ..core.constants import PROMOCODE_DESCRIPTION_MAX_LENGTH, PROMOCODE_MAX_LENGTH, PROMOCODE_MIN_LENGTH
from ..core.enums import DiscountType
from .base import CamelModel, PaginationMeta, RequestModel

Code = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        to_upper=True,
        min_length=PROMOCODE_MIN_LENGTH,
        max_length=PROMOCODE_MAX_LENGTH,
        pattern=r"^[A-Za-z0-9_-]+$",
    ),
]
Description = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=PROMOCODE_DESCRIPTION_MAX_LENGTH)
]


class PromocodeCreate(RequestModel):
    code: Code
    description: Optional[Description] = None
    discount_type: DiscountType
    discount_value: float = Field(..., ge=0)
    max_discount_amount: Optional[float] = Field(None, ge=0)
    minimum_order_amount: float = Field(0.0, ge=0)
    applicable_products: List[str] = Field(default_factory=list)
    applicable_categories: List[str] = Field(default_factory=list)
    applicable_industries: List[str] = Field(default_factory=list)
    is_global: bool = False
    usage_limit: Optional[int] = Field(None, ge=1)
    usage_limit_per_user: int = Field(1, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: datetime
    is_active: bool = True
    is_public: bool = True

    @field_validator("discount_value")
    @classmethod
    def percentage_within_bounds(cls, value: float, info) -> float:
        if info.data.get("discount_type") == DiscountType.PERCENTAGE.value and value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return value


class PromocodeUpdate(RequestModel):
    code: Optional[Code] = None
    description: Optional[Description] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    max_discount_amount: Optional[float] = Field(None, ge=0)
    minimum_order_amount: Optional[float] = Field(None, ge=0)
    applicable_products: Optional[List[str]] = None
    applicable_categories: Optional[List[str]] = None
    applicable_industries: Optional[List[str]] = None
    usage_limit: Optional[int] = Field(None, ge=1)
    usage_limit_per_user: Optional[int] = Field(None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None


class PromocodeUsageResponse(CamelModel):
    user_id: str
    purchase_id: Optional[str] = None
    discount_amount: float
    used_at: datetime


class PromocodeResponse(CamelModel):
    id: str
    code: str
    description: Optional[str] = None
    created_by: str
    created_by_type: str
    seller_id: Optional[str] = None
    discount_type: DiscountType
    discount_value: float
    max_discount_amount: Optional[float] = None
    minimum_order_amount: float
    applicable_products: List[str]
    applicable_categories: List[str]
    applicable_industries: List[str]
    is_global: bool
    usage_limit: Optional[int] = None
    usage_limit_per_user: int
    current_usage_count: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    is_public: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PromocodeListResponse(CamelModel):
    promocodes: List[PromocodeResponse]
    pagination: PaginationMeta


class PromocodeSummary(CamelModel):
    """What a buyer learns about a code before applying it."""

    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float
    max_discount_amount: Optional[float] = None
    minimum_order_amount: float
    is_global: bool
    valid_until: datetime
    remaining_uses: Optional[int] = None
    user_remaining_uses: int


class PromocodeUsageStats(CamelModel):
    code: str
    total_usages: int
    total_discount_given: float
    remaining_uses: Optional[int] = None
    unique_users: int
    is_active: bool
    valid_until: datetime
    usage_history: List[PromocodeUsageResponse]


class ApplicablePromocodeGroups(CamelModel):
    global_: List[PromocodeResponse] = Field(default_factory=list, alias="global")
    product_specific: List[PromocodeResponse] = Field(default_factory=list)
    category_specific: List[PromocodeResponse] = Field(default_factory=list)
    industry_specific: List[PromocodeResponse] = Field(default_factory=list)


class ApplicablePromocodesResponse(CamelModel):
    requested_products: List[str]
    applicable_promocodes: ApplicablePromocodeGroups
    total_count: int
