# backend/app/services/engagement_service.py
"""
Engagement Service for the Spyke marketplace.

Reviews and favorite/upvote reactions on published products. The
denormalized counters on the product (average_rating, total_reviews,
favorites, upvotes) are recomputed from their rows after every change,
so repeating a request never drifts them.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import ResponseMessage
from ..core.enums import ReactionKind
from ..core.exceptions import NotFoundException, ValidationException
from ..models.engagement import ProductReview
from ..models.product import Product
from ..models.user import User
from ..repositories.base_repository import Page
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

REACTION_COUNTERS = {
    ReactionKind.FAVORITE: "favorites",
    ReactionKind.UPVOTE: "upvotes",
}


@dataclass
class ReactionState:
    active: bool
    count: int


class EngagementService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.products = RepositoryFactory.create_product_repository(db)
        self.reviews = RepositoryFactory.create_review_repository(db)
        self.reactions = RepositoryFactory.create_reaction_repository(db)

    def _require_published(self, identifier: str) -> Product:
        product = self.products.get_by_id_or_slug(identifier)
        if product is None or not product.is_published:
            raise NotFoundException(ResponseMessage.not_found("Product"))
        return product

    @BaseService.measure_operation("add_review")
    def add_review(
        self, identifier: str, user: User, rating: int, comment: Optional[str] = None
    ) -> ProductReview:
        """
        Record the caller's single review and refresh the product's rating.

        Raises:
            NotFoundException: Unknown or unpublished product
            ValidationException: The caller owns the product or already reviewed it
        """
        product = self._require_published(identifier)
        if product.seller_id == user.id:
            raise ValidationException(
                "You cannot review your own product", code="CANNOT_REVIEW_OWN_PRODUCT"
            )
        if self.reviews.get_for_user(product.id, user.id) is not None:
            raise ValidationException(
                "You have already reviewed this product", code="ALREADY_REVIEWED"
            )

        with self.transaction():
            review = self.reviews.create(
                product_id=product.id, user_id=user.id, rating=rating, comment=comment
            )
            average, count = self.reviews.rating_summary(product.id)
            product.average_rating = round(average, 1)
            product.total_reviews = count
            self.products.flush()

        self.log_operation("add_review", product_id=product.id, user_id=user.id, rating=rating)
        return review

    def list_reviews(self, identifier: str, *, page: int = 1, limit: int = 20) -> Page[ProductReview]:
        product = self._require_published(identifier)
        return self.reviews.list_for_product(product.id, page=page, limit=limit)

    def set_reaction(
        self, identifier: str, user: User, kind: ReactionKind, active: bool
    ) -> ReactionState:
        """Set or clear the caller's favorite or upvote. Setting twice is a no-op."""
        product = self._require_published(identifier)
        existing = self.reactions.get(product.id, user.id, kind.value)

        with self.transaction():
            if active and existing is None:
                self.reactions.create(product_id=product.id, user_id=user.id, kind=kind.value)
            elif not active and existing is not None:
                self.reactions.remove(existing)
            count = self.reactions.count(product.id, kind.value)
            setattr(product, REACTION_COUNTERS[kind], count)
            self.products.flush()

        return ReactionState(active=active, count=count)
