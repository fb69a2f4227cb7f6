# backend/app/repositories/product_repository.py
"""Data access for marketplace products."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import case, or_
from sqlalchemy.orm import Query, Session

from ..core.enums import ProductStatus, SortOrder
from ..models.product import Product, product_tools
from .base_repository import BaseRepository, Page

PRODUCT_SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "created_at": Product.created_at,
    "price": Product.price,
    "sales": Product.sales,
    "views": Product.views,
    "title": Product.title,
    "rating": Product.average_rating,
}


@dataclass
class ProductFilters:
    category_id: Optional[str] = None
    industry_id: Optional[str] = None
    tool_id: Optional[str] = None
    type: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    is_featured: Optional[bool] = None
    seller_id: Optional[str] = None
    status: Optional[str] = ProductStatus.PUBLISHED.value


class ProductRepository(BaseRepository[Product]):
    def __init__(self, db: Session):
        super().__init__(db, Product)

    def get_by_slug(self, slug: str) -> Optional[Product]:
        return self.find_one_by(slug=slug)

    def get_by_id_or_slug(self, identifier: str) -> Optional[Product]:
        return self.get_by_id(identifier) or self.get_by_slug(identifier)

    def slug_exists(self, slug: str) -> bool:
        return self.exists(slug=slug)

    def get_many(self, ids: Iterable[str]) -> List[Product]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        return self._execute_query(self.db.query(Product).filter(Product.id.in_(id_list)))

    def search(
        self,
        filters: ProductFilters,
        *,
        page: int,
        limit: int,
        sort_by: str = "createdAt",
        sort_order: SortOrder = SortOrder.DESC,
    ) -> Page[Product]:
        query = self._filtered(filters)
        column = PRODUCT_SORT_COLUMNS.get(sort_by, Product.created_at)
        ordering = column.desc() if sort_order == SortOrder.DESC else column.asc()
        return self._paginate(query.order_by(ordering, Product.id.asc()), page, limit)

    def _filtered(self, filters: ProductFilters) -> Query:
        query = self.db.query(Product)
        if filters.status:
            query = query.filter(Product.status == filters.status)
        if filters.seller_id:
            query = query.filter(Product.seller_id == filters.seller_id)
        if filters.category_id:
            query = query.filter(Product.category_id == filters.category_id)
        if filters.industry_id:
            query = query.filter(Product.industry_id == filters.industry_id)
        if filters.type:
            query = query.filter(Product.type == filters.type)
        if filters.is_featured is not None:
            query = query.filter(Product.is_featured.is_(filters.is_featured))
        if filters.min_price is not None:
            query = query.filter(Product.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Product.price <= filters.max_price)
        if filters.tool_id:
            query = query.filter(
                Product.id.in_(
                    self.db.query(product_tools.c.product_id).filter(
                        product_tools.c.tool_id == filters.tool_id
                    )
                )
            )
        if filters.search:
            query = query.filter(Product.search_key.like(f"%{filters.search.strip().casefold()}%"))
        return query

    def increment_views(self, product: Product) -> None:
        product.views = (product.views or 0) + 1
        self.flush()

    def increment_sales(self, product_ids: Iterable[str]) -> None:
        for product in self.get_many(product_ids):
            product.sales = (product.sales or 0) + 1
        self.flush()

    # ---------------------------------------------------------------- discovery

    def _published(self) -> Query:
        return self.db.query(Product).filter(Product.status == ProductStatus.PUBLISHED.value)

    def related(self, product: Product, limit: int) -> List[Product]:
        """Published products sharing the category, industry or type of the given one."""
        query = (
            self._published()
            .filter(Product.id != product.id)
            .filter(
                or_(
                    Product.category_id == product.category_id,
                    Product.industry_id == product.industry_id,
                    Product.type == product.type,
                )
            )
            .order_by(Product.sales.desc(), Product.created_at.desc(), Product.id.asc())
        )
        return self._execute_query(query.limit(limit))

    def featured(
        self,
        limit: int,
        *,
        min_rating: float,
        category_id: Optional[str] = None,
        product_type: Optional[str] = None,
    ) -> List[Product]:
        """
        Verified or hand-picked products, pinned ones first, then by score.

        The score rewards sales, rating, upvotes, views, review volume and
        tested products, and penalizes ratings under min_rating.
        """
        score = (
            Product.sales * 2
            + Product.average_rating * 10
            + Product.upvotes * 1.5
            + Product.views * 0.1
            + Product.total_reviews * 3
            + case((Product.is_tested.is_(True), 15), else_=0)
            + case((Product.average_rating >= min_rating, 20), else_=-10)
        )
        query = self._published().filter(
            or_(Product.is_verified.is_(True), Product.is_featured.is_(True))
        )
        if category_id:
            query = query.filter(Product.category_id == category_id)
        if product_type:
            query = query.filter(Product.type == product_type)
        query = query.order_by(
            Product.is_featured.desc(), score.desc(), Product.created_at.desc(), Product.id.asc()
        )
        return self._execute_query(query.limit(limit))

    def trending(self, limit: int, since: datetime) -> List[Product]:
        query = (
            self._published()
            .filter(Product.updated_at >= since)
            .order_by(
                Product.sales.desc(),
                Product.views.desc(),
                Product.upvotes.desc(),
                Product.created_at.desc(),
                Product.id.asc(),
            )
        )
        return self._execute_query(query.limit(limit))

    def high_rated(self, limit: int, *, min_reviews: int, min_rating: float) -> List[Product]:
        query = (
            self._published()
            .filter(Product.total_reviews >= min_reviews, Product.average_rating >= min_rating)
            .order_by(
                Product.average_rating.desc(),
                Product.total_reviews.desc(),
                Product.sales.desc(),
                Product.id.asc(),
            )
        )
        return self._execute_query(query.limit(limit))

    def recently_added(self, limit: int, since: datetime) -> List[Product]:
        query = (
            self._published()
            .filter(Product.is_verified.is_(True), Product.created_at >= since)
            .order_by(Product.created_at.desc(), Product.id.desc())
        )
        return self._execute_query(query.limit(limit))
