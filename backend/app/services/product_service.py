# backend/app/services/product_service.py
"""
Product Service for the Spyke marketplace.

Owns the product lifecycle and keeps the taxonomy counters honest:
category, industry and tool product_count only ever reflect PUBLISHED
products, so every status transition and every reference change on a
published product moves the counters exactly once.
"""

import logging
import re
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import FEATURED_MIN_RATING, HIGH_RATING_THRESHOLD, ResponseMessage
from ..core.enums import ProductStatus, SortOrder
from ..core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import utc_now
from ..models.product import Product
from ..models.taxonomy import Category, Industry, Tool
from ..models.user import User
from ..repositories.base_repository import Page
from ..repositories.factory import RepositoryFactory
from ..repositories.product_repository import ProductFilters
from .base import BaseService
from .taxonomy_service import TaxonomyService

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")

# attribute, API field name
REVIEW_REQUIRED_FIELDS = (
    ("full_description", "fullDescription"),
    ("thumbnail", "thumbnail"),
    ("setup_time", "setupTime"),
)


def slugify(title: str) -> str:
    slug = _SLUG_STRIP.sub("-", title.lower()).strip("-")
    return slug or "product"


def bump_version(version: str) -> str:
    """1.0.0 -> 1.1.0; anything unparseable restarts at 1.1.0."""
    parts = version.split(".")
    try:
        major, minor = int(parts[0]), int(parts[1])
    except (IndexError, ValueError):
        return "1.1.0"
    return f"{major}.{minor + 1}.0"


class ProductService(BaseService):
    """Create, browse, publish and retire marketplace products."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_product_repository(db)
        self.purchase_repository = RepositoryFactory.create_purchase_repository(db)
        self.categories = TaxonomyService(db, Category)
        self.industries = TaxonomyService(db, Industry)
        self.tools = TaxonomyService(db, Tool)

    # ----------------------------------------------------------------- helpers

    def _unique_slug(self, title: str, exclude_id: Optional[str] = None) -> str:
        base = slugify(title)
        slug = base
        suffix = 2
        while True:
            existing = self.repository.get_by_slug(slug)
            if existing is None or existing.id == exclude_id:
                return slug
            slug = f"{base}-{suffix}"
            suffix += 1

    def _require(self, identifier: str) -> Product:
        product = self.repository.get_by_id_or_slug(identifier)
        if product is None:
            raise NotFoundException(ResponseMessage.not_found("Product"))
        return product

    def _require_owned(self, identifier: str, user: User) -> Product:
        product = self._require(identifier)
        if product.seller_id != user.id and not user.is_admin:
            raise ForbiddenException("You can only manage your own products")
        return product

    def _count_references(self, category_id: str, industry_id: str, tool_ids: List[str], delta: int) -> None:
        adjust = "increment_product_count" if delta > 0 else "decrement_product_count"
        getattr(self.categories, adjust)([category_id])
        getattr(self.industries, adjust)([industry_id])
        if tool_ids:
            getattr(self.tools, adjust)(tool_ids)

    # -------------------------------------------------------------- operations

    @BaseService.measure_operation("create_product")
    def create(self, seller: User, data: Dict[str, Any]) -> Product:
        """
        Create a draft product owned by the caller.

        Raises:
            ValidationException: A referenced category, industry or tool is missing or inactive
        """
        self.categories.require_active([data["category_id"]])
        self.industries.require_active([data["industry_id"]])
        tools = self.tools.require_active(data.get("tool_ids") or [])

        fields = {key: value for key, value in data.items() if key != "tool_ids"}
        fields["slug"] = self._unique_slug(fields["title"])
        fields["seller_id"] = seller.id
        fields["status"] = ProductStatus.DRAFT.value
        fields["current_version"] = "1.0.0"
        fields["versions"] = [
            {"version": "1.0.0", "releaseDate": utc_now().isoformat(), "changes": ["Initial release"]}
        ]

        with self.transaction():
            product = self.repository.create(**fields)
            product.tools = tools
            self.repository.flush()

        self.log_operation("create_product", product_id=product.id, seller_id=seller.id)
        return product

    def list(
        self,
        filters: ProductFilters,
        *,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Page[Product]:
        if page < 1 or limit < 1:
            raise ValidationException("Invalid pagination parameters")
        filters.status = ProductStatus.PUBLISHED.value
        return self.repository.search(
            filters, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
        )

    def my_products(
        self, seller: User, *, page: int = 1, limit: int = 20, status: Optional[str] = None
    ) -> Page[Product]:
        filters = ProductFilters(seller_id=seller.id, status=status)
        return self.repository.search(filters, page=page, limit=limit)

    def get(self, identifier: str, viewer: Optional[User] = None) -> Product:
        """Fetch by id or slug. Unpublished products are hidden from everyone but the owner and admins."""
        product = self._require(identifier)
        if not product.is_published:
            if viewer is None or (viewer.id != product.seller_id and not viewer.is_admin):
                raise NotFoundException(ResponseMessage.not_found("Product"))
            return product

        with self.transaction():
            self.repository.increment_views(product)
        return product

    @BaseService.measure_operation("update_product")
    def update(self, identifier: str, user: User, data: Dict[str, Any]) -> Product:
        product = self._require_owned(identifier, user)

        changes = {key: value for key, value in data.items() if value is not None}
        version_notes = changes.pop("version_notes", None)
        new_tool_ids = changes.pop("tool_ids", None)

        if "category_id" in changes:
            self.categories.require_active([changes["category_id"]])
        if "industry_id" in changes:
            self.industries.require_active([changes["industry_id"]])
        new_tools = self.tools.require_active(new_tool_ids) if new_tool_ids is not None else None

        if "title" in changes and changes["title"] != product.title:
            changes["slug"] = self._unique_slug(changes["title"], exclude_id=product.id)

        with self.transaction():
            if product.is_published:
                old_tools = product.tool_ids
                new_category = changes.get("category_id", product.category_id)
                new_industry = changes.get("industry_id", product.industry_id)
                target_tools = [tool.id for tool in new_tools] if new_tools is not None else old_tools
                if new_category != product.category_id:
                    self.categories.decrement_product_count([product.category_id])
                    self.categories.increment_product_count([new_category])
                if new_industry != product.industry_id:
                    self.industries.decrement_product_count([product.industry_id])
                    self.industries.increment_product_count([new_industry])
                dropped = [tool_id for tool_id in old_tools if tool_id not in target_tools]
                added = [tool_id for tool_id in target_tools if tool_id not in old_tools]
                if dropped:
                    self.tools.decrement_product_count(dropped)
                if added:
                    self.tools.increment_product_count(added)

            if version_notes:
                next_version = bump_version(product.current_version)
                changes["current_version"] = next_version
                changes["versions"] = list(product.versions or []) + [
                    {
                        "version": next_version,
                        "releaseDate": utc_now().isoformat(),
                        "changes": version_notes,
                    }
                ]

            self.repository.apply_updates(product, **changes)
            if new_tools is not None:
                product.tools = new_tools
                self.repository.flush()

        return product

    def publish(self, identifier: str, user: User) -> Product:
        """Move to PUBLISHED and count the product against its references once."""
        product = self._require_owned(identifier, user)
        if product.is_published:
            raise ValidationException("Product is already published", code="ALREADY_PUBLISHED")

        with self.transaction():
            product.status = ProductStatus.PUBLISHED.value
            product.published_at = product.published_at or utc_now()
            self._count_references(product.category_id, product.industry_id, product.tool_ids, 1)
            self.repository.flush()

        self.log_operation("publish_product", product_id=product.id)
        return product

    def unpublish(self, identifier: str, user: User) -> Product:
        product = self._require_owned(identifier, user)
        if not product.is_published:
            raise ValidationException("Product is not published", code="NOT_PUBLISHED")

        with self.transaction():
            product.status = ProductStatus.DRAFT.value
            self._count_references(product.category_id, product.industry_id, product.tool_ids, -1)
            self.repository.flush()

        self.log_operation("unpublish_product", product_id=product.id)
        return product

    @BaseService.measure_operation("delete_product")
    def delete(self, identifier: str, user: User) -> None:
        product = self._require_owned(identifier, user)
        if self.purchase_repository.product_has_purchases(product.id):
            raise ValidationException(
                "Cannot delete a product that has been purchased", code="HAS_PURCHASES"
            )

        with self.transaction():
            if product.is_published:
                self._count_references(
                    product.category_id, product.industry_id, product.tool_ids, -1
                )
            self.repository.delete(product.id)

        self.log_operation("delete_product", product_id=product.id)

    def set_featured(self, identifier: str, is_featured: bool) -> Product:
        product = self._require(identifier)
        with self.transaction():
            product.is_featured = is_featured
            self.repository.flush()
        return product


    # -------------------------------------------------------------- moderation

    def submit_for_review(self, identifier: str, user: User, message: Optional[str] = None) -> Product:
        """
        Queue a draft or rejected product for admin review.

        Raises:
            ValidationException: The product is not in draft or rejected
            BusinessRuleException: Fields a reviewer needs are still empty
        """
        product = self._require_owned(identifier, user)
        if product.status not in (ProductStatus.DRAFT.value, ProductStatus.REJECTED.value):
            raise ValidationException(
                "Only draft or rejected products can be submitted for review",
                code="INVALID_STATUS_TRANSITION",
            )
        missing = [label for attr, label in REVIEW_REQUIRED_FIELDS if not getattr(product, attr)]
        if missing:
            raise BusinessRuleException(
                "Product is missing fields required for review",
                code="MISSING_FIELDS",
                details={"missing": missing},
            )

        with self.transaction():
            product.status = ProductStatus.PENDING_REVIEW.value
            product.submitted_at = utc_now()
            product.review_message = message
            product.rejection_reason = None
            self.repository.flush()

        self.log_operation("submit_product_for_review", product_id=product.id)
        return product

    def verify(self, identifier: str, is_verified: bool, is_tested: bool) -> Product:
        product = self._require(identifier)
        with self.transaction():
            product.is_verified = is_verified
            product.is_tested = is_tested
            self.repository.flush()
        self.log_operation(
            "verify_product", product_id=product.id, is_verified=is_verified, is_tested=is_tested
        )
        return product

    @BaseService.measure_operation("update_product_status")
    def update_status(
        self, identifier: str, user: User, new_status: str, reason: Optional[str] = None
    ) -> Product:
        """
        Move a product between lifecycle states.

        Admins may set any state but pending_review, and only they may
        reject, which needs a pending product and a reason. Owners may
        publish only verified and tested products, and such products never
        go back to draft. Taxonomy counters follow the published flag.
        """
        product = self._require_owned(identifier, user)
        if new_status == product.status:
            raise ValidationException(
                f"Product is already {new_status}", code="INVALID_STATUS_TRANSITION"
            )
        if new_status == ProductStatus.PENDING_REVIEW.value:
            raise ValidationException(
                "Use submit-for-review to request moderation", code="INVALID_STATUS_TRANSITION"
            )
        if new_status == ProductStatus.REJECTED.value:
            if not user.is_admin:
                raise ForbiddenException("Only admins can reject products")
            if product.status != ProductStatus.PENDING_REVIEW.value:
                raise ValidationException(
                    "Only products pending review can be rejected", code="INVALID_STATUS_TRANSITION"
                )
            if not reason:
                raise ValidationException("A rejection reason is required", code="REASON_REQUIRED")
        if not user.is_admin:
            vetted = product.is_verified and product.is_tested
            if new_status == ProductStatus.PUBLISHED.value and not vetted:
                raise ValidationException(
                    "Product must be verified and tested before publishing", code="NOT_VERIFIED"
                )
            if new_status == ProductStatus.DRAFT.value and vetted:
                raise ValidationException(
                    "Verified products cannot return to draft", code="INVALID_STATUS_TRANSITION"
                )

        with self.transaction():
            was_published = product.is_published
            product.status = new_status
            if new_status == ProductStatus.REJECTED.value:
                product.rejection_reason = reason
            if new_status == ProductStatus.PUBLISHED.value:
                product.published_at = product.published_at or utc_now()
                product.rejection_reason = None
            if was_published != product.is_published:
                delta = 1 if product.is_published else -1
                self._count_references(
                    product.category_id, product.industry_id, product.tool_ids, delta
                )
            self.repository.flush()

        self.log_operation(
            "update_product_status", product_id=product.id, status=new_status, actor_id=user.id
        )
        return product

    def admin_list(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        seller_id: Optional[str] = None,
    ) -> Page[Product]:
        """Every product regardless of status; the moderation queue is status=pending_review."""
        filters = ProductFilters(seller_id=seller_id, status=status)
        return self.repository.search(filters, page=page, limit=limit)

    # --------------------------------------------------------------- discovery

    def related(self, identifier: str, limit: int = 6) -> List[Product]:
        product = self._require(identifier)
        if not product.is_published:
            raise NotFoundException(ResponseMessage.not_found("Product"))
        return self.repository.related(product, limit)

    def featured(
        self,
        limit: int = 12,
        *,
        category_id: Optional[str] = None,
        product_type: Optional[str] = None,
        min_rating: float = FEATURED_MIN_RATING,
    ) -> List[Product]:
        return self.repository.featured(
            limit, min_rating=min_rating, category_id=category_id, product_type=product_type
        )

    def trending(self, limit: int = 8, days: int = 7) -> List[Product]:
        return self.repository.trending(limit, utc_now() - timedelta(days=days))

    def high_rated(self, limit: int = 6, min_reviews: int = 3) -> List[Product]:
        return self.repository.high_rated(
            limit, min_reviews=min_reviews, min_rating=HIGH_RATING_THRESHOLD
        )

    def recently_added(self, limit: int = 6, days: int = 30) -> List[Product]:
        return self.repository.recently_added(limit, utc_now() - timedelta(days=days))

    def discovery(self) -> Dict[str, List[Product]]:
        """The four home-page sections in one call."""
        return {
            "featured": self.featured(8),
            "trending": self.trending(6),
            "high_rated": self.high_rated(6),
            "recently_added": self.recently_added(6),
        }
