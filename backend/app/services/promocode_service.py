# backend/app/services/promocode_service.py
"""
Promocode Service for the Spyke marketplace.

Admins may create global codes; sellers create codes scoped to their own
catalogue. Only the creator or an admin may manage a code. Once a code has
been redeemed its identity (code, discount type and value) is frozen and it
can no longer be deleted.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import ResponseMessage
from ..core.enums import CreatorType
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.promocode import Promocode
from ..models.user import User
from ..repositories.base_repository import Page
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

FROZEN_AFTER_USE = ("code", "discount_type", "discount_value")
INVALID_PROMOCODE = "Invalid or expired promocode"


class PromocodeService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_promocode_repository(db)
        self.product_repository = RepositoryFactory.create_product_repository(db)

    def _require(self, id: str) -> Promocode:
        promocode = self.repository.get_by_id(id)
        if promocode is None:
            raise NotFoundException(ResponseMessage.not_found("Promocode"))
        return promocode

    def _require_managed(self, id: str, user: User) -> Promocode:
        promocode = self._require(id)
        if promocode.created_by != user.id and not user.is_admin:
            raise ForbiddenException("You can only manage your own promocodes")
        return promocode

    def _check_window(self, valid_from, valid_until) -> None:
        if ensure_utc(valid_until) <= utc_now():
            raise ValidationException("Valid until date must be in the future")
        if valid_from is not None and ensure_utc(valid_from) >= ensure_utc(valid_until):
            raise ValidationException("Valid from date must be before valid until date")

    @BaseService.measure_operation("create_promocode")
    def create(self, user: User, data: Dict[str, Any]) -> Promocode:
        """
        Create a promocode for the caller.

        Raises:
            ForbiddenException: A seller asked for a global code
            ValidationException: Duplicate code or a validity window that already ended
        """
        is_admin = user.is_admin
        if data.get("is_global") and not is_admin:
            raise ForbiddenException("Only admins can create global promocodes")

        code = data["code"].strip().upper()
        if self.repository.get_by_code(code):
            raise ValidationException("Promocode already exists", code="DUPLICATE_CODE")

        self._check_window(data.get("valid_from"), data["valid_until"])

        fields = {key: value for key, value in data.items() if value is not None}
        fields["code"] = code
        fields["created_by"] = user.id
        if is_admin:
            fields["created_by_type"] = CreatorType.ADMIN.value
        else:
            fields["created_by_type"] = CreatorType.SELLER.value
            fields["seller_id"] = user.id

        with self.transaction():
            promocode = self.repository.create(**fields)

        self.log_operation("create_promocode", code=code, created_by=user.id)
        return promocode

    def list(
        self,
        user: User,
        *,
        page: int = 1,
        limit: int = 20,
        is_active: Optional[bool] = None,
        created_by_type: Optional[str] = None,
    ) -> Page[Promocode]:
        """Admins see every code; sellers see their own."""
        if user.is_admin:
            return self.repository.list_filtered(
                page=page, limit=limit, is_active=is_active, created_by_type=created_by_type
            )
        return self.repository.list_filtered(
            page=page, limit=limit, seller_id=user.id, is_active=is_active
        )

    def get(self, id: str, user: User) -> Promocode:
        return self._require_managed(id, user)

    @BaseService.measure_operation("update_promocode")
    def update(self, id: str, user: User, data: Dict[str, Any]) -> Promocode:
        promocode = self._require_managed(id, user)
        changes = {key: value for key, value in data.items() if value is not None}

        if promocode.current_usage_count > 0:
            frozen = [field for field in FROZEN_AFTER_USE if field in changes]
            if frozen:
                raise ValidationException(
                    "Cannot modify code, discount type or discount value of a used promocode",
                    code="PROMOCODE_IN_USE",
                )

        if "code" in changes:
            changes["code"] = changes["code"].strip().upper()
            existing = self.repository.get_by_code(changes["code"])
            if existing is not None and existing.id != promocode.id:
                raise ValidationException("Promocode already exists", code="DUPLICATE_CODE")

        if "valid_until" in changes or "valid_from" in changes:
            self._check_window(
                changes.get("valid_from", promocode.valid_from),
                changes.get("valid_until", promocode.valid_until),
            )

        with self.transaction():
            self.repository.apply_updates(promocode, **changes)
        return promocode

    def delete(self, id: str, user: User) -> None:
        promocode = self._require_managed(id, user)
        if promocode.current_usage_count > 0:
            raise ValidationException("Cannot delete a promocode that has been used", code="PROMOCODE_IN_USE")
        with self.transaction():
            self.repository.delete(promocode.id)
        self.log_operation("delete_promocode", code=promocode.code)

    def toggle_status(self, id: str, user: User) -> Promocode:
        promocode = self._require_managed(id, user)
        with self.transaction():
            promocode.is_active = not promocode.is_active
            self.repository.flush()
        return promocode

    def find_usable(self, code: str, user_id: str) -> Optional[Promocode]:
        """The code if it is valid now and the user still has uses left."""
        promocode = self.repository.get_by_code(code)
        if promocode is None or not promocode.can_be_used_by(user_id):
            return None
        return promocode

    def validate(self, code: str, user: User) -> Dict[str, Any]:
        promocode = self.find_usable(code, user.id)
        if promocode is None:
            raise ValidationException(INVALID_PROMOCODE, code="INVALID_PROMOCODE")
        return {
            "code": promocode.code,
            "description": promocode.description,
            "discount_type": promocode.discount_type,
            "discount_value": promocode.discount_value,
            "max_discount_amount": promocode.max_discount_amount,
            "minimum_order_amount": promocode.minimum_order_amount,
            "is_global": promocode.is_global,
            "valid_until": promocode.valid_until,
            "remaining_uses": (
                promocode.usage_limit - promocode.current_usage_count
                if promocode.usage_limit
                else None
            ),
            "user_remaining_uses": promocode.usage_limit_per_user - promocode.usage_count_for(user.id),
        }

    def usage_stats(self, id: str, user: User) -> Dict[str, Any]:
        promocode = self._require_managed(id, user)
        history = list(promocode.usage_history)
        return {
            "code": promocode.code,
            "total_usages": promocode.current_usage_count,
            "total_discount_given": round(sum(usage.discount_amount for usage in history), 2),
            "remaining_uses": (
                promocode.usage_limit - promocode.current_usage_count
                if promocode.usage_limit
                else None
            ),
            "unique_users": len({usage.user_id for usage in history}),
            "is_active": promocode.is_active,
            "valid_until": promocode.valid_until,
            "usage_history": history,
        }

    def public(self, *, page: int = 1, limit: int = 10) -> Page[Promocode]:
        return self.repository.list_public(utc_now(), page=page, limit=limit)

    def applicable(self, product_ids: List[str]) -> Dict[str, Any]:
        """
        Public codes usable on the given products, grouped by how they apply.

        A global code lands in "global"; otherwise a code is grouped by the
        first non-empty restriction list and kept only when that list
        matches one of the products.
        """
        ids = [product_id.strip() for product_id in product_ids if product_id and product_id.strip()]
        if not ids:
            raise ValidationException("Valid product IDs are required")

        products = [product for product in self.product_repository.get_many(ids) if product.is_published]
        if not products:
            raise NotFoundException("No valid products found")

        found_ids = {product.id for product in products}
        category_ids = {product.category_id for product in products}
        industry_ids = {product.industry_id for product in products}

        groups: Dict[str, List[Promocode]] = {
            "global": [],
            "product_specific": [],
            "category_specific": [],
            "industry_specific": [],
        }
        for promocode in self.repository.list_public_in_window(utc_now()):
            if promocode.is_global:
                groups["global"].append(promocode)
            elif promocode.applicable_products:
                if found_ids.intersection(promocode.applicable_products):
                    groups["product_specific"].append(promocode)
            elif promocode.applicable_categories:
                if category_ids.intersection(promocode.applicable_categories):
                    groups["category_specific"].append(promocode)
            elif promocode.applicable_industries:
                if industry_ids.intersection(promocode.applicable_industries):
                    groups["industry_specific"].append(promocode)

        return {
            "requested_products": [product.id for product in products],
            "applicable_promocodes": groups,
            "total_count": sum(len(group) for group in groups.values()),
        }
