# backend/app/routes/v1/purchase.py
"""
Cart and purchase routes - API v1

Endpoints under /v1/purchase:
    GET /cart                       → Current cart
    POST /cart/add                  → Add a product
    DELETE /cart/remove/{productId} → Remove a product
    DELETE /cart/clear              → Empty the cart
    POST /cart/promocode            → Apply a promocode
    DELETE /cart/promocode          → Remove the promocode
    POST /create                    → Checkout (also POST /)
    GET /my-purchases               → Purchase history
    GET /access/{productId}         → Premium content of a purchased product
    PATCH /{id}/complete            → Mark payment completed (admin)
    PATCH /{id}/refund              → Refund a completed purchase (admin)
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user, require_admin
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ResponseMessage
from ...core.enums import ProductType
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...middleware.rate_limiter import get_client_ip
from ...models.user import User
from ...schemas.base import ApiResponse, PaginationMeta
from ...schemas.purchase import (
    AddToCartRequest,
    ApplyPromocodeRequest,
    CartResponse,
    CheckoutRequest,
    ProductAccessResponse,
    PurchaseListResponse,
    PurchaseResponse,
    RefundRequest,
)
from ...services.purchase_service import PurchaseService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["purchase-v1"])


def get_purchase_service(db: Session = Depends(get_db)) -> PurchaseService:
    return PurchaseService(db)


async def _cart_call(request: Request, method, *args, message: str = ResponseMessage.SUCCESS):
    try:
        cart = await asyncio.to_thread(method, *args)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[CartResponse].build(request, CartResponse.from_cart(cart), message)


@router.get("/cart", response_model=ApiResponse[CartResponse])
async def get_cart(
    request: Request,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await _cart_call(request, service.get_cart, current_user)


@router.post("/cart/add", response_model=ApiResponse[CartResponse])
async def add_to_cart(
    request: Request,
    payload: AddToCartRequest,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await _cart_call(
        request, service.add_to_cart, current_user, payload.product_id, message="Product added to cart"
    )


@router.delete("/cart/remove/{product_id}", response_model=ApiResponse[CartResponse])
async def remove_from_cart(
    request: Request,
    product_id: str,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await _cart_call(
        request, service.remove_from_cart, current_user, product_id, message="Product removed from cart"
    )


@router.delete("/cart/clear", response_model=ApiResponse[CartResponse])
async def clear_cart(
    request: Request,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await _cart_call(request, service.clear_cart, current_user, message="Cart cleared")


@router.post("/cart/promocode", response_model=ApiResponse[CartResponse])
async def apply_promocode(
    request: Request,
    payload: ApplyPromocodeRequest,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await _cart_call(
        request, service.apply_promocode, current_user, payload.code, message="Promocode applied"
    )


@router.delete("/cart/promocode", response_model=ApiResponse[CartResponse])
async def remove_promocode(
    request: Request,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await _cart_call(request, service.remove_promocode, current_user, message="Promocode removed")


@router.post("", response_model=ApiResponse[PurchaseResponse], status_code=status.HTTP_201_CREATED)
@router.post("/create", response_model=ApiResponse[PurchaseResponse], status_code=status.HTTP_201_CREATED)
async def checkout(
    request: Request,
    payload: Optional[CheckoutRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    """Turn the cart into a purchase. Free orders are completed immediately."""
    payload = payload or CheckoutRequest()
    try:
        purchase = await asyncio.to_thread(
            service.checkout,
            current_user,
            payment_method=payload.payment_method,
            payment_reference=payload.payment_reference,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PurchaseResponse].build(
        request,
        PurchaseResponse.model_validate(purchase),
        "Purchase created successfully",
        status.HTTP_201_CREATED,
    )


@router.get("/my-purchases", response_model=ApiResponse[PurchaseListResponse])
async def my_purchases(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    product_type: Optional[ProductType] = Query(None, alias="type"),
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    result = await asyncio.to_thread(
        service.my_purchases,
        current_user,
        page=page,
        limit=limit,
        product_type=product_type.value if product_type else None,
    )
    data = PurchaseListResponse(
        purchases=[PurchaseResponse.model_validate(purchase) for purchase in result.items],
        pagination=PaginationMeta.from_page(result),
    )
    return ApiResponse[PurchaseListResponse].build(request, data)


@router.get("/access/{product_id}", response_model=ApiResponse[ProductAccessResponse])
async def product_access(
    request: Request,
    product_id: str,
    current_user: User = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service),
):
    try:
        access = await asyncio.to_thread(service.product_access, current_user, product_id)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ProductAccessResponse].build(request, ProductAccessResponse.model_validate(access))


@router.patch("/{purchase_id}/complete", response_model=ApiResponse[PurchaseResponse])
async def complete_payment(
    request: Request,
    purchase_id: str,
    _: User = Depends(require_admin),
    service: PurchaseService = Depends(get_purchase_service),
):
    try:
        purchase = await asyncio.to_thread(service.complete_payment, purchase_id)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PurchaseResponse].build(
        request, PurchaseResponse.model_validate(purchase), "Payment completed"
    )


@router.patch("/{purchase_id}/refund", response_model=ApiResponse[PurchaseResponse])
async def refund_purchase(
    request: Request,
    purchase_id: str,
    payload: RefundRequest,
    _: User = Depends(require_admin),
    service: PurchaseService = Depends(get_purchase_service),
):
    try:
        purchase = await asyncio.to_thread(service.refund, purchase_id, payload.amount, payload.reason)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PurchaseResponse].build(
        request, PurchaseResponse.model_validate(purchase), "Purchase refunded"
    )
