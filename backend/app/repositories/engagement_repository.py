# backend/app/repositories/engagement_repository.py
"""Data access for product reviews and favorite/upvote reactions."""

from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.engagement import ProductReaction, ProductReview
from .base_repository import BaseRepository, Page


class ReviewRepository(BaseRepository[ProductReview]):
    def __init__(self, db: Session):
        super().__init__(db, ProductReview)

    def get_for_user(self, product_id: str, user_id: str) -> Optional[ProductReview]:
        return self.find_one_by(product_id=product_id, user_id=user_id)

    def list_for_product(self, product_id: str, *, page: int, limit: int) -> Page[ProductReview]:
        query = (
            self.db.query(ProductReview)
            .filter(ProductReview.product_id == product_id)
            .order_by(ProductReview.created_at.desc(), ProductReview.id.desc())
        )
        return self._paginate(query, page, limit)

    def rating_summary(self, product_id: str) -> Tuple[float, int]:
        """Average rating and review count, computed in SQL."""
        average, count = (
            self.db.query(func.avg(ProductReview.rating), func.count(ProductReview.id))
            .filter(ProductReview.product_id == product_id)
            .one()
        )
        return float(average or 0.0), int(count or 0)


class ReactionRepository(BaseRepository[ProductReaction]):
    def __init__(self, db: Session):
        super().__init__(db, ProductReaction)

    def get(self, product_id: str, user_id: str, kind: str) -> Optional[ProductReaction]:
        return self.db.get(ProductReaction, (product_id, user_id, kind))

    def remove(self, reaction: ProductReaction) -> None:
        self.db.delete(reaction)
        self.flush()

    def count(self, product_id: str, kind: str) -> int:
        return (
            self.db.query(func.count())
            .select_from(ProductReaction)
            .filter(ProductReaction.product_id == product_id, ProductReaction.kind == kind)
            .scalar()
        )
