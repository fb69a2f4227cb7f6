# backend/app/routes/v1/products.py
"""
Product routes - API v1

Versioned product endpoints under /v1/products.
All business logic delegated to ProductService.

Endpoints:
    POST /                              → Create a draft product (seller/admin)
    GET /                               → Browse published products
    GET /seller/my-products             → Caller's products in every status
    GET /admin/all                      → Every product, filterable by status (admin)
    GET /featured, /trending, /high-rated, /recent → Discovery listings
    GET /discovery                      → All four discovery sections at once
    GET /{identifier}                   → Product by id or slug
    PUT /{identifier}                   → Partial update (owner/admin)
    POST /{identifier}/publish          → Publish (owner/admin)
    POST /{identifier}/unpublish        → Back to draft (owner/admin)
    PUT /{identifier}/featured          → Feature or unfeature (admin)
    DELETE /{identifier}                → Delete unpurchased product (owner/admin)
    GET /{identifier}/related           → Products sharing category, industry or type
    POST /{identifier}/submit-for-review → Queue for moderation (owner/admin)
    POST /{identifier}/verify           → Set verified and tested flags (admin)
    PATCH /{identifier}/status          → Moderated status change
    POST /{identifier}/review           → Add the caller's review
    GET /{identifier}/reviews           → Reviews, newest first
    POST /{identifier}/favorite         → Set or clear a favorite
    POST /{identifier}/upvote           → Set or clear an upvote
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ...api.dependencies import (
    get_current_user,
    get_current_user_optional,
    require_admin,
    require_seller_or_admin,
)
from ...core.constants import (
    DEFAULT_PAGE_SIZE,
    FEATURED_MIN_RATING,
    MAX_PAGE_SIZE,
    ResponseMessage,
)
from ...core.enums import ProductStatus, ProductType, ReactionKind, SortOrder
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...models.user import User
from ...repositories.product_repository import ProductFilters
from ...schemas.base import ApiResponse, PaginationMeta
from ...schemas.product import (
    DiscoveryResponse,
    FavoriteRequest,
    FavoriteResponse,
    FeatureRequest,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    StatusUpdateRequest,
    SubmitForReviewRequest,
    UpvoteRequest,
    UpvoteResponse,
    VerifyRequest,
)
from ...services.engagement_service import EngagementService
from ...services.product_service import ProductService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["products-v1"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency to get product service."""
    return ProductService(db)


def get_engagement_service(db: Session = Depends(get_db)) -> EngagementService:
    return EngagementService(db)


def _products(products) -> List[ProductResponse]:
    return [ProductResponse.model_validate(product) for product in products]


def _listing(result) -> ProductListResponse:
    return ProductListResponse(
        products=[ProductResponse.model_validate(product) for product in result.items],
        pagination=PaginationMeta.from_page(result),
    )


@router.post("", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    payload: ProductCreate,
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(product_service.create, current_user, payload.model_dump())
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.CREATED, status.HTTP_201_CREATED
    )


@router.get("", response_model=ApiResponse[ProductListResponse])
async def list_products(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = Query(None),
    industry: Optional[str] = Query(None),
    tool: Optional[str] = Query(None),
    type: Optional[ProductType] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    product_service: ProductService = Depends(get_product_service),
):
    """Published products only; every filter is optional and they combine with AND."""
    filters = ProductFilters(
        category_id=category,
        industry_id=industry,
        tool_id=tool,
        type=type.value if type else None,
        search=search,
        min_price=min_price,
        max_price=max_price,
        is_featured=is_featured,
    )
    try:
        result = await asyncio.to_thread(
            product_service.list,
            filters,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductListResponse].build(request, _listing(result))


@router.get("/seller/my-products", response_model=ApiResponse[ProductListResponse])
async def my_products(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    product_status: Optional[ProductStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    result = await asyncio.to_thread(
        product_service.my_products,
        current_user,
        page=page,
        limit=limit,
        status=product_status.value if product_status else None,
    )
    return ApiResponse[ProductListResponse].build(request, _listing(result))


@router.get("/admin/all", response_model=ApiResponse[ProductListResponse])
async def admin_list_products(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    product_status: Optional[ProductStatus] = Query(None, alias="status"),
    seller_id: Optional[str] = Query(None, alias="sellerId"),
    _: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service),
):
    result = await asyncio.to_thread(
        product_service.admin_list,
        page=page,
        limit=limit,
        status=product_status.value if product_status else None,
        seller_id=seller_id,
    )
    return ApiResponse[ProductListResponse].build(request, _listing(result))


@router.get("/featured", response_model=ApiResponse[List[ProductResponse]])
async def featured_products(
    request: Request,
    limit: int = Query(12, ge=1, le=50),
    category: Optional[str] = Query(None),
    type: Optional[ProductType] = Query(None),
    min_rating: float = Query(FEATURED_MIN_RATING, alias="minRating", ge=0, le=5),
    product_service: ProductService = Depends(get_product_service),
):
    products = await asyncio.to_thread(
        product_service.featured,
        limit,
        category_id=category,
        product_type=type.value if type else None,
        min_rating=min_rating,
    )
    return ApiResponse[List[ProductResponse]].build(request, _products(products))


@router.get("/trending", response_model=ApiResponse[List[ProductResponse]])
async def trending_products(
    request: Request,
    limit: int = Query(8, ge=1, le=50),
    days: int = Query(7, ge=1, le=365),
    product_service: ProductService = Depends(get_product_service),
):
    products = await asyncio.to_thread(product_service.trending, limit, days)
    return ApiResponse[List[ProductResponse]].build(request, _products(products))


@router.get("/high-rated", response_model=ApiResponse[List[ProductResponse]])
async def high_rated_products(
    request: Request,
    limit: int = Query(6, ge=1, le=50),
    min_reviews: int = Query(3, alias="minReviews", ge=0),
    product_service: ProductService = Depends(get_product_service),
):
    products = await asyncio.to_thread(product_service.high_rated, limit, min_reviews)
    return ApiResponse[List[ProductResponse]].build(request, _products(products))


@router.get("/recent", response_model=ApiResponse[List[ProductResponse]])
async def recent_products(
    request: Request,
    limit: int = Query(6, ge=1, le=50),
    days: int = Query(30, ge=1, le=365),
    product_service: ProductService = Depends(get_product_service),
):
    products = await asyncio.to_thread(product_service.recently_added, limit, days)
    return ApiResponse[List[ProductResponse]].build(request, _products(products))


@router.get("/discovery", response_model=ApiResponse[DiscoveryResponse])
async def discovery(
    request: Request,
    product_service: ProductService = Depends(get_product_service),
):
    """Featured, trending, high-rated and recently added sections for the home page."""
    sections = await asyncio.to_thread(product_service.discovery)
    data = DiscoveryResponse(**{name: _products(items) for name, items in sections.items()})
    return ApiResponse[DiscoveryResponse].build(request, data)


@router.get("/{identifier}", response_model=ApiResponse[ProductResponse])
async def get_product(
    request: Request,
    identifier: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(product_service.get, identifier, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(request, ProductResponse.model_validate(product))


@router.put("/{identifier}", response_model=ApiResponse[ProductResponse])
async def update_product(
    request: Request,
    identifier: str,
    payload: ProductUpdate,
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(
            product_service.update, identifier, current_user, payload.model_dump(exclude_unset=True)
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.UPDATED
    )


@router.post("/{identifier}/publish", response_model=ApiResponse[ProductResponse])
async def publish_product(
    request: Request,
    identifier: str,
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(product_service.publish, identifier, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.UPDATED
    )


@router.post("/{identifier}/unpublish", response_model=ApiResponse[ProductResponse])
async def unpublish_product(
    request: Request,
    identifier: str,
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(product_service.unpublish, identifier, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.UPDATED
    )


@router.put("/{identifier}/featured", response_model=ApiResponse[ProductResponse])
async def feature_product(
    request: Request,
    identifier: str,
    payload: FeatureRequest,
    _: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(product_service.set_featured, identifier, payload.is_featured)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.UPDATED
    )


@router.delete("/{identifier}", response_model=ApiResponse[None])
async def delete_product(
    request: Request,
    identifier: str,
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        await asyncio.to_thread(product_service.delete, identifier, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[None].build(request, None, ResponseMessage.DELETED)


@router.get("/{identifier}/related", response_model=ApiResponse[List[ProductResponse]])
async def related_products(
    request: Request,
    identifier: str,
    limit: int = Query(6, ge=1, le=50),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        products = await asyncio.to_thread(product_service.related, identifier, limit)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[List[ProductResponse]].build(request, _products(products))


@router.post(
    "/{identifier}/submit-for-review",
    response_model=ApiResponse[ProductResponse],
)
async def submit_for_review(
    request: Request,
    identifier: str,
    payload: Optional[SubmitForReviewRequest] = Body(None),
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    message = payload.message if payload else None
    try:
        product = await asyncio.to_thread(
            product_service.submit_for_review, identifier, current_user, message
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), "Product submitted for review"
    )


@router.post("/{identifier}/verify", response_model=ApiResponse[ProductResponse])
async def verify_product(
    request: Request,
    identifier: str,
    payload: VerifyRequest,
    _: User = Depends(require_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(
            product_service.verify, identifier, payload.is_verified, payload.is_tested
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.UPDATED
    )


@router.patch("/{identifier}/status", response_model=ApiResponse[ProductResponse])
async def update_product_status(
    request: Request,
    identifier: str,
    payload: StatusUpdateRequest,
    current_user: User = Depends(require_seller_or_admin),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        product = await asyncio.to_thread(
            product_service.update_status, identifier, current_user, payload.status, payload.reason
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductResponse].build(
        request, ProductResponse.model_validate(product), ResponseMessage.UPDATED
    )


@router.post(
    "/{identifier}/review",
    response_model=ApiResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_review(
    request: Request,
    identifier: str,
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    try:
        review = await asyncio.to_thread(
            engagement_service.add_review, identifier, current_user, payload.rating, payload.comment
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ReviewResponse].build(
        request, ReviewResponse.model_validate(review), "Review added", status.HTTP_201_CREATED
    )


@router.get("/{identifier}/reviews", response_model=ApiResponse[ReviewListResponse])
async def list_reviews(
    request: Request,
    identifier: str,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    try:
        result = await asyncio.to_thread(
            engagement_service.list_reviews, identifier, page=page, limit=limit
        )
    except DomainException as e:
        handle_domain_exception(e)
    data = ReviewListResponse(
        reviews=[ReviewResponse.model_validate(review) for review in result.items],
        pagination=PaginationMeta.from_page(result),
    )
    return ApiResponse[ReviewListResponse].build(request, data)


@router.post("/{identifier}/favorite", response_model=ApiResponse[FavoriteResponse])
async def favorite_product(
    request: Request,
    identifier: str,
    payload: FavoriteRequest,
    current_user: User = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    try:
        state = await asyncio.to_thread(
            engagement_service.set_reaction,
            identifier,
            current_user,
            ReactionKind.FAVORITE,
            payload.is_favorited,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[FavoriteResponse].build(
        request, FavoriteResponse(is_favorited=state.active, favorites=state.count)
    )


@router.post("/{identifier}/upvote", response_model=ApiResponse[UpvoteResponse])
async def upvote_product(
    request: Request,
    identifier: str,
    payload: UpvoteRequest,
    current_user: User = Depends(get_current_user),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    try:
        state = await asyncio.to_thread(
            engagement_service.set_reaction,
            identifier,
            current_user,
            ReactionKind.UPVOTE,
            payload.is_upvoted,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[UpvoteResponse].build(
        request, UpvoteResponse(is_upvoted=state.active, upvotes=state.count)
    )
