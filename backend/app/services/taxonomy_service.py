# backend/app/services/taxonomy_service.py
"""
Taxonomy Service for the Spyke marketplace.

One service class drives the category, industry and tool resources. They
differ only in their table, their display label and the tool description.

Rules:
- Names are unique case-insensitively among non-deleted rows (409)
- Deleting is a soft delete and is refused while products reference the row (400)
- Reads never return soft-deleted rows
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy.orm import Session

from ..core.constants import ResponseMessage
from ..core.enums import SortOrder
from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..models.taxonomy import Category, Industry, TaxonomyMixin, Tool
from ..repositories.base_repository import Page
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

TAXONOMY_LABELS: Dict[Type[TaxonomyMixin], str] = {
    Category: "Category",
    Industry: "Industry",
    Tool: "Tool",
}


class TaxonomyService(BaseService):
    """CRUD, soft delete and product counters for one taxonomy table."""

    def __init__(self, db: Session, model: Type[TaxonomyMixin]):
        super().__init__(db)
        self.model = model
        self.label = TAXONOMY_LABELS[model]
        self.repository = RepositoryFactory.create_taxonomy_repository(db, model)

    def _duplicate_error(self) -> ConflictException:
        return ConflictException(f"{self.label} with this name already exists", code="DUPLICATE_NAME")

    def _not_found(self) -> NotFoundException:
        return NotFoundException(ResponseMessage.not_found(self.label))

    def _require_live(self, id: str) -> TaxonomyMixin:
        entity = self.repository.get_live(id)
        if entity is None:
            raise self._not_found()
        return entity

    @BaseService.measure_operation("create")
    def create(self, data: Dict[str, Any]) -> TaxonomyMixin:
        """
        Create a taxonomy row.

        Args:
            data: Validated fields (name, optional icon, isActive, description for tools)

        Raises:
            ConflictException: A live row already uses this name, or the unique index rejected it
        """
        name = data["name"].strip()
        if self.repository.find_live_by_name(name):
            raise self._duplicate_error()

        fields = {key: value for key, value in data.items() if value is not None}
        fields["name"] = name
        try:
            with self.transaction():
                entity = self.repository.create(**fields)
        except ConflictException as exc:
            raise self._duplicate_error() from exc

        self.log_operation("create_taxonomy", resource=self.label, id=entity.id)
        return entity

    @BaseService.measure_operation("list")
    def list(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "name",
        sort_order: SortOrder = SortOrder.ASC,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page[TaxonomyMixin]:
        if page < 1 or limit < 1:
            raise ValidationException("Invalid pagination parameters")
        return self.repository.list_paginated(
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
            search=search,
            is_active=is_active,
        )

    def list_active(self) -> List[TaxonomyMixin]:
        return self.repository.find_active()

    def get(self, id: str) -> TaxonomyMixin:
        return self._require_live(id)

    @BaseService.measure_operation("update")
    def update(self, id: str, data: Dict[str, Any]) -> TaxonomyMixin:
        entity = self._require_live(id)

        changes = {key: value for key, value in data.items() if value is not None}
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if self.repository.find_live_by_name(changes["name"], exclude_id=id):
                raise self._duplicate_error()

        try:
            with self.transaction():
                self.repository.apply_updates(entity, **changes)
        except ConflictException as exc:
            raise self._duplicate_error() from exc
        return entity

    @BaseService.measure_operation("delete")
    def delete(self, id: str) -> None:
        """Soft delete; refused while any product still counts against the row."""
        entity = self._require_live(id)
        if (entity.product_count or 0) > 0:
            raise ValidationException(
                ResponseMessage.has_products(self.label), code="HAS_PRODUCTS"
            )

        with self.transaction():
            entity.soft_delete()
            self.repository.flush()
        self.log_operation("delete_taxonomy", resource=self.label, id=id)

    def toggle_status(self, id: str) -> TaxonomyMixin:
        entity = self._require_live(id)
        with self.transaction():
            entity.is_active = not entity.is_active
            self.repository.flush()
        return entity

    def restore(self, id: str) -> TaxonomyMixin:
        """Undo a soft delete unless a live row has taken the name since."""
        entity = self.repository.get_any(id)
        if entity is None or not entity.is_deleted:
            raise self._not_found()
        if self.repository.find_live_by_name(entity.name, exclude_id=id):
            raise self._duplicate_error()
        with self.transaction():
            entity.restore()
            self.repository.flush()
        return entity

    def require_active(self, ids: Iterable[str]) -> List[TaxonomyMixin]:
        """Resolve ids to live, active rows or raise a 400 naming the first bad id."""
        id_list = list(dict.fromkeys(ids))
        found = {entity.id: entity for entity in self.repository.get_many_live(id_list)}
        for id in id_list:
            entity = found.get(id)
            if entity is None or not entity.is_active:
                raise ValidationException(f"{self.label} {id} is not available", code="INVALID_REFERENCE")
        return [found[id] for id in id_list]

    def increment_product_count(self, ids: Iterable[str]) -> None:
        self.repository.adjust_product_count(ids, 1)

    def decrement_product_count(self, ids: Iterable[str]) -> None:
        self.repository.adjust_product_count(ids, -1)

    def recount_products(self, id: str) -> TaxonomyMixin:
        """Recompute product_count from the published products that reference the row."""
        entity = self.repository.get_any(id)
        if entity is None:
            raise self._not_found()
        with self.transaction():
            entity.product_count = self.repository.count_published_products(id)
            self.repository.flush()
        return entity

    def analytics(self) -> Dict[str, Any]:
        """Overview counters, the busiest rows and the newest rows."""
        return {
            "overview": self.repository.overview_counts(),
            "top_by_products": self.repository.top_by_product_count(),
            "recent": self.repository.most_recent(),
        }
