"""Schemas for marketplace products."""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import Field, StringConstraints

from ..core.constants import (
    PRODUCT_SHORT_DESCRIPTION_MAX_LENGTH,
    PRODUCT_TITLE_MAX_LENGTH,
    REVIEW_COMMENT_MAX_LENGTH,
    REVIEW_MESSAGE_MAX_LENGTH,
)
from ..core.enums import ProductStatus, ProductType
from .base import CamelModel, PaginationMeta, RequestModel

Title = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=3, max_length=PRODUCT_TITLE_MAX_LENGTH)
]
ShortDescription = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=1, max_length=PRODUCT_SHORT_DESCRIPTION_MAX_LENGTH
    ),
]


class Faq(CamelModel):
    question: str
    answer: str


class ProductVersion(CamelModel):
    version: str
    release_date: Optional[datetime] = None
    changes: List[str] = Field(default_factory=list)


class ProductBase(RequestModel):
    full_description: Optional[str] = None
    thumbnail: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    preview_video: Optional[str] = None
    original_price: Optional[float] = Field(None, ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    setup_time: Optional[str] = None
    target_audience: Optional[str] = None
    benefits: List[str] = Field(default_factory=list)
    use_case_examples: List[str] = Field(default_factory=list)
    how_it_works: List[str] = Field(default_factory=list)
    outcome: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    faqs: List[Faq] = Field(default_factory=list)
    premium_content: Dict[str, Any] = Field(default_factory=dict)
    has_refund_policy: bool = False


class ProductCreate(ProductBase):
    title: Title
    short_description: ShortDescription
    type: ProductType = ProductType.PROMPT
    category_id: str
    industry_id: str
    tool_ids: List[str] = Field(default_factory=list)
    price: float = Field(0.0, ge=0)


class ProductUpdate(RequestModel):
    title: Optional[Title] = None
    short_description: Optional[ShortDescription] = None
    full_description: Optional[str] = None
    thumbnail: Optional[str] = None
    images: Optional[List[str]] = None
    preview_video: Optional[str] = None
    type: Optional[ProductType] = None
    category_id: Optional[str] = None
    industry_id: Optional[str] = None
    tool_ids: Optional[List[str]] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    setup_time: Optional[str] = None
    target_audience: Optional[str] = None
    benefits: Optional[List[str]] = None
    use_case_examples: Optional[List[str]] = None
    how_it_works: Optional[List[str]] = None
    outcome: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    faqs: Optional[List[Faq]] = None
    premium_content: Optional[Dict[str, Any]] = None
    has_refund_policy: Optional[bool] = None
    version_notes: Optional[List[str]] = Field(
        None, description="When given, a new version entry is recorded"
    )


class FeatureRequest(RequestModel):
    is_featured: bool


class SubmitForReviewRequest(RequestModel):
    message: Optional[str] = Field(None, max_length=REVIEW_MESSAGE_MAX_LENGTH)


class VerifyRequest(RequestModel):
    is_verified: bool
    is_tested: bool


class StatusUpdateRequest(RequestModel):
    status: ProductStatus
    reason: Optional[str] = Field(None, max_length=REVIEW_MESSAGE_MAX_LENGTH)


class ReviewCreate(RequestModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=REVIEW_COMMENT_MAX_LENGTH)


class FavoriteRequest(RequestModel):
    is_favorited: bool


class UpvoteRequest(RequestModel):
    is_upvoted: bool


class TaxonomyRef(CamelModel):
    id: str
    name: str
    icon: str


class SellerRef(CamelModel):
    id: str
    name: str


class ProductResponse(CamelModel):
    id: str
    title: str
    slug: str
    short_description: str
    full_description: Optional[str] = None
    thumbnail: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    preview_video: Optional[str] = None
    type: ProductType
    status: ProductStatus
    price: float
    original_price: Optional[float] = None
    currency: str
    category: Optional[TaxonomyRef] = None
    industry: Optional[TaxonomyRef] = None
    tools: List[TaxonomyRef] = Field(default_factory=list)
    seller: Optional[SellerRef] = None
    setup_time: Optional[str] = None
    target_audience: Optional[str] = None
    benefits: List[str] = Field(default_factory=list)
    use_case_examples: List[str] = Field(default_factory=list)
    how_it_works: List[str] = Field(default_factory=list)
    outcome: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    faqs: List[Faq] = Field(default_factory=list)
    versions: List[ProductVersion] = Field(default_factory=list)
    current_version: str
    has_refund_policy: bool
    is_featured: bool
    views: int
    sales: int
    favorites: int = 0
    upvotes: int = 0
    average_rating: float = 0.0
    total_reviews: int = 0
    is_verified: bool = False
    is_tested: bool = False
    submitted_at: Optional[datetime] = None
    review_message: Optional[str] = None
    rejection_reason: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductListResponse(CamelModel):
    products: List[ProductResponse]
    pagination: PaginationMeta


class DiscoveryResponse(CamelModel):
    featured: List[ProductResponse]
    trending: List[ProductResponse]
    high_rated: List[ProductResponse]
    recently_added: List[ProductResponse]
    total_sections: int = 4


class ReviewResponse(CamelModel):
    id: str
    product_id: str
    user_id: str
    user_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewListResponse(CamelModel):
    reviews: List[ReviewResponse]
    pagination: PaginationMeta


class FavoriteResponse(CamelModel):
    is_favorited: bool
    favorites: int


class UpvoteResponse(CamelModel):
    is_upvoted: bool
    upvotes: int
