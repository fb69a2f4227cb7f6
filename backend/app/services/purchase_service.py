# backend/app/services/purchase_service.py
"""
Cart and Purchase Service for the Spyke marketplace.

Cart totals are always recomputed from the live product prices, and an
applied promocode is re-checked on every recompute: a code that stopped
being usable or applicable is silently dropped from the cart.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import ResponseMessage
from ..core.enums import DiscountType, PaymentStatus
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.cart import Cart
from ..models.product import Product
from ..models.promocode import Promocode
from ..models.purchase import Purchase, PurchaseItem
from ..models.user import User
from ..repositories.base_repository import Page
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .promocode_service import INVALID_PROMOCODE, PromocodeService

logger = logging.getLogger(__name__)


class PurchaseService(BaseService):
    """Cart management, checkout and access to purchased content."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.cart_repository = RepositoryFactory.create_cart_repository(db)
        self.repository = RepositoryFactory.create_purchase_repository(db)
        self.product_repository = RepositoryFactory.create_product_repository(db)
        self.promocodes = PromocodeService(db)

    # ----------------------------------------------------------------- helpers

    @staticmethod
    def _is_applicable(promocode: Promocode, products: List[Product]) -> bool:
        product_ids = [product.id for product in products]
        return (
            promocode.is_applicable_to_products(product_ids)
            and promocode.is_applicable_to_categories(product.category_id for product in products)
            and promocode.is_applicable_to_industries(product.industry_id for product in products)
        )

    def _live_products(self, cart: Cart) -> List[Product]:
        return [item.product for item in cart.items if item.product is not None and item.product.is_published]

    def _recalculate(self, cart: Cart) -> None:
        """Recompute totals and re-check the applied promocode. Caller flushes."""
        products = self._live_products(cart)
        total = round(sum(product.price for product in products), 2)
        cart.total_amount = total
        discount = 0.0

        if cart.promocode_code:
            promocode = self.promocodes.find_usable(cart.promocode_code, cart.user_id)
            if promocode is not None and products and self._is_applicable(promocode, products):
                discount = promocode.calculate_discount(total)
            if discount <= 0:
                logger.info("Dropping promocode %s from cart %s", cart.promocode_code, cart.id)
                cart.clear_promocode()
            else:
                cart.promocode_discount_amount = discount

        cart.final_amount = round(max(total - discount, 0.0), 2)

    def _cart_for(self, user: User) -> Cart:
        return self.cart_repository.get_or_create(user.id)

    # -------------------------------------------------------------------- cart

    def get_cart(self, user: User) -> Cart:
        """The user's cart with unpublished or deleted products dropped."""
        with self.transaction():
            cart = self._cart_for(user)
            stale = [
                item.product_id
                for item in cart.items
                if item.product is None or not item.product.is_published
            ]
            for product_id in stale:
                self.cart_repository.remove_item(cart, product_id)
            self._recalculate(cart)
            self.cart_repository.flush()
        return cart

    @BaseService.measure_operation("add_to_cart")
    def add_to_cart(self, user: User, product_id: str) -> Cart:
        product = self.product_repository.get_by_id(product_id)
        if product is None:
            raise NotFoundException(ResponseMessage.not_found("Product"))
        if not product.is_published:
            raise ValidationException("Product is not available for purchase")
        if product.seller_id == user.id:
            raise ValidationException("You cannot purchase your own product")
        if self.repository.has_purchased(user.id, product.id):
            raise ValidationException("You have already purchased this product")

        with self.transaction():
            cart = self._cart_for(user)
            if cart.has_product(product.id):
                raise ValidationException("Product is already in your cart")
            self.cart_repository.add_item(cart, product.id)
            self._recalculate(cart)
            self.cart_repository.flush()
        return cart

    def remove_from_cart(self, user: User, product_id: str) -> Cart:
        with self.transaction():
            cart = self._cart_for(user)
            if not self.cart_repository.remove_item(cart, product_id):
                raise NotFoundException("Product not found in cart")
            self._recalculate(cart)
            self.cart_repository.flush()
        return cart

    def clear_cart(self, user: User) -> Cart:
        with self.transaction():
            cart = self._cart_for(user)
            self.cart_repository.clear(cart)
        return cart

    def apply_promocode(self, user: User, code: str) -> Cart:
        """
        Attach a promocode to the cart.

        Raises:
            ValidationException: Empty cart, unusable code, code not applicable
                to the cart's products, or minimum order amount not met
        """
        with self.transaction():
            cart = self._cart_for(user)
            products = self._live_products(cart)
            if not products:
                raise ValidationException("Cart is empty")

            promocode = self.promocodes.find_usable(code, user.id)
            if promocode is None:
                raise ValidationException(INVALID_PROMOCODE, code="INVALID_PROMOCODE")
            if not self._is_applicable(promocode, products):
                raise ValidationException("Promocode is not applicable to the items in your cart")

            total = round(sum(product.price for product in products), 2)
            if total < (promocode.minimum_order_amount or 0):
                raise ValidationException(
                    f"Minimum order amount of {promocode.minimum_order_amount:.2f} required"
                )

            cart.promocode_code = promocode.code
            cart.promocode_discount_percentage = (
                promocode.discount_value
                if promocode.discount_type == DiscountType.PERCENTAGE.value
                else None
            )
            cart.promocode_discount_amount = promocode.calculate_discount(total)
            self._recalculate(cart)
            self.cart_repository.flush()

        self.log_operation("apply_promocode", user_id=user.id, code=promocode.code)
        return cart

    def remove_promocode(self, user: User) -> Cart:
        with self.transaction():
            cart = self._cart_for(user)
            cart.clear_promocode()
            self._recalculate(cart)
            self.cart_repository.flush()
        return cart

    # ---------------------------------------------------------------- checkout

    @BaseService.measure_operation("checkout")
    def checkout(
        self,
        user: User,
        *,
        payment_method: str = "manual",
        payment_reference: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Purchase:
        """
        Turn the cart into a purchase.

        Promocode usage is recorded, product sales counters move and the cart
        is emptied. A purchase whose final amount is zero is completed on the
        spot; anything else waits for payment confirmation.
        """
        with self.transaction():
            cart = self._cart_for(user)
            products = [
                product
                for product in self._live_products(cart)
                if not self.repository.has_purchased(user.id, product.id)
            ]
            if not products:
                raise ValidationException("Cart is empty")

            self._recalculate(cart)
            total = round(sum(product.price for product in products), 2)
            promocode = None
            discount = 0.0
            if cart.promocode_code:
                promocode = self.promocodes.find_usable(cart.promocode_code, user.id)
                if promocode is not None:
                    discount = promocode.calculate_discount(total)

            purchase = self.repository.create(
                user_id=user.id,
                total_amount=total,
                discount_amount=discount,
                final_amount=round(max(total - discount, 0.0), 2),
                currency=products[0].currency,
                promocode_code=promocode.code if promocode is not None and discount > 0 else None,
                payment_method=payment_method,
                payment_reference=payment_reference,
                ip_address=ip_address,
                user_agent=user_agent,
                items=[
                    PurchaseItem(product_id=product.id, seller_id=product.seller_id, price=product.price)
                    for product in products
                ],
            )
            if promocode is not None and discount > 0:
                promocode.record_usage(user.id, purchase.id, discount)

            self.product_repository.increment_sales(product.id for product in products)
            if purchase.final_amount == 0:
                purchase.grant_access()
            self.cart_repository.clear(cart)
            self.repository.flush()

        self.log_operation(
            "checkout",
            purchase_id=purchase.id,
            user_id=user.id,
            final_amount=purchase.final_amount,
        )
        return purchase

    def my_purchases(
        self, user: User, *, page: int = 1, limit: int = 20, product_type: Optional[str] = None
    ) -> Page[Purchase]:
        return self.repository.list_for_user(user.id, page=page, limit=limit, product_type=product_type)

    def product_access(self, user: User, product_id: str) -> Dict[str, Any]:
        """Premium content for a buyer, the owning seller or an admin."""
        product = self.product_repository.get_by_id(product_id)
        if product is None:
            raise NotFoundException(ResponseMessage.not_found("Product"))

        granted_at = None
        if product.seller_id != user.id and not user.is_admin:
            items = [
                item
                for item in self.repository.accessible_items(user.id)
                if item.product_id == product.id
            ]
            if not items or not self.repository.has_purchased(user.id, product.id):
                raise ForbiddenException("You have not purchased this product")
            granted_at = items[0].access_granted_at

        return {
            "product_id": product.id,
            "title": product.title,
            "type": product.type,
            "current_version": product.current_version,
            "premium_content": product.premium_content or {},
            "access_granted_at": granted_at,
        }

    # ------------------------------------------------------------------- admin

    def _require_purchase(self, purchase_id: str) -> Purchase:
        purchase = self.repository.get_by_id(purchase_id)
        if purchase is None:
            raise NotFoundException(ResponseMessage.not_found("Purchase"))
        return purchase

    def complete_payment(self, purchase_id: str, payment_reference: Optional[str] = None) -> Purchase:
        purchase = self._require_purchase(purchase_id)
        if purchase.payment_status == PaymentStatus.COMPLETED.value:
            raise ValidationException("Purchase is already completed")
        if purchase.payment_status == PaymentStatus.REFUNDED.value:
            raise ValidationException("Purchase has been refunded")

        with self.transaction():
            purchase.grant_access()
            if payment_reference:
                purchase.payment_reference = payment_reference
            self.repository.flush()
        self.log_operation("complete_payment", purchase_id=purchase.id)
        return purchase

    def refund(self, purchase_id: str, amount: Optional[float], reason: Optional[str]) -> Purchase:
        purchase = self._require_purchase(purchase_id)
        if purchase.payment_status != PaymentStatus.COMPLETED.value:
            raise ValidationException("Only completed purchases can be refunded")
        if amount is not None and amount > purchase.final_amount:
            raise ValidationException("Refund amount exceeds the amount paid")

        with self.transaction():
            purchase.process_refund(amount, reason)
            self.repository.flush()
        self.log_operation("refund_purchase", purchase_id=purchase.id)
        return purchase
