# backend/app/repositories/taxonomy_repository.py
"""
Repository for categories, industries and tools.

Every read excludes soft-deleted rows. Name comparisons go through the
case-folded name_key column.
"""

from typing import Iterable, List, Optional, Sequence, Type

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from ..core.enums import ProductStatus, SortOrder
from ..models.product import Product, product_tools
from ..models.taxonomy import Category, Industry, TaxonomyMixin, Tool, name_key_for
from .base_repository import BaseRepository, Page

SORTABLE_FIELDS = ("name", "created_at", "updated_at", "product_count", "is_active")


class TaxonomyRepository(BaseRepository[TaxonomyMixin]):
    """Data access shared by the three taxonomy tables."""

    def __init__(self, db: Session, model: Type[TaxonomyMixin]):
        super().__init__(db, model)
        self.search_columns: Sequence = (model.name_key,)
        if model is Tool:
            self.search_columns = (Tool.name_key, func.lower(Tool.description))

    def _live(self) -> Query:
        return self.db.query(self.model).filter(self.model.is_deleted.is_(False))

    def get_live(self, id: str) -> Optional[TaxonomyMixin]:
        """Fetch a non-deleted row by id."""
        return self._live().filter(self.model.id == id).first()

    def get_any(self, id: str) -> Optional[TaxonomyMixin]:
        """Fetch a row by id including soft-deleted ones."""
        return self.get_by_id(id)

    def find_live_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[TaxonomyMixin]:
        """Case-insensitive name lookup among non-deleted rows."""
        query = self._live().filter(self.model.name_key == name_key_for(name))
        if exclude_id:
            query = query.filter(self.model.id != exclude_id)
        return query.first()

    def list_paginated(
        self,
        *,
        page: int,
        limit: int,
        sort_by: str = "name",
        sort_order: SortOrder = SortOrder.ASC,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page[TaxonomyMixin]:
        query = self._live()
        if search:
            pattern = f"%{name_key_for(search)}%"
            query = query.filter(or_(*[column.like(pattern) for column in self.search_columns]))
        if is_active is not None:
            query = query.filter(self.model.is_active.is_(is_active))

        column = getattr(self.model, sort_by if sort_by in SORTABLE_FIELDS else "name")
        ordering = column.desc() if sort_order == SortOrder.DESC else column.asc()
        query = query.order_by(ordering, self.model.id.asc())
        return self._paginate(query, page, limit)

    def find_active(self) -> List[TaxonomyMixin]:
        """Active, non-deleted rows sorted by name."""
        return self._execute_query(
            self._live().filter(self.model.is_active.is_(True)).order_by(self.model.name.asc())
        )

    def get_many_live(self, ids: Iterable[str]) -> List[TaxonomyMixin]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        return self._execute_query(self._live().filter(self.model.id.in_(id_list)))

    def adjust_product_count(self, ids: Iterable[str], delta: int) -> int:
        """
        Move product_count by delta for each id, never below zero.

        Returns:
            Number of rows touched
        """
        touched = 0
        for entity in self.db.query(self.model).filter(self.model.id.in_(list(ids))).all():
            entity.product_count = max(0, (entity.product_count or 0) + delta)
            touched += 1
        self.flush()
        return touched

    def count_published_products(self, id: str) -> int:
        """Number of published products referencing this row."""
        published = Product.status == ProductStatus.PUBLISHED.value
        if self.model is Category:
            query = self.db.query(Product).filter(Product.category_id == id, published)
        elif self.model is Industry:
            query = self.db.query(Product).filter(Product.industry_id == id, published)
        else:
            query = (
                self.db.query(Product)
                .join(product_tools, product_tools.c.product_id == Product.id)
                .filter(product_tools.c.tool_id == id, published)
            )
        return query.count()

    def overview_counts(self) -> dict:
        base = self.db.query(self.model)
        return {
            "total": base.count(),
            "active": base.filter(self.model.is_active.is_(True), self.model.is_deleted.is_(False)).count(),
            "inactive": base.filter(self.model.is_active.is_(False), self.model.is_deleted.is_(False)).count(),
            "deleted": base.filter(self.model.is_deleted.is_(True)).count(),
        }

    def top_by_product_count(self, limit: int = 10) -> List[TaxonomyMixin]:
        return self._execute_query(
            self._live().order_by(self.model.product_count.desc(), self.model.name.asc()).limit(limit)
        )

    def most_recent(self, limit: int = 5) -> List[TaxonomyMixin]:
        return self._execute_query(
            self._live().order_by(self.model.created_at.desc(), self.model.id.desc()).limit(limit)
        )
