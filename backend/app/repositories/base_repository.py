# backend/app/repositories/base_repository.py
"""
Base Repository Pattern for the Spyke marketplace.

Provides the foundation for all repository classes with:
- Lookups and writes keyed by ULID strings
- Translation of SQLAlchemy errors into repository exceptions
- Pagination helpers shared by every listing endpoint

Repositories flush but never commit; transactions belong to the service layer.
"""

from dataclasses import dataclass
import logging
import math
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import IntegrityConstraintException, RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class Page(Generic[T]):
    """One page of results together with the totals needed for pagination links."""

    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class BaseRepository(Generic[T]):
    """
    Data access shared by every model repository.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def _integrity_error(self, action: str, exc: IntegrityError) -> IntegrityConstraintException:
        self.logger.warning("Integrity error %s %s: %s", action, self.model.__name__, exc.orig)
        self.db.rollback()
        return IntegrityConstraintException(f"Integrity constraint violated: {exc.orig}")

    def get_by_id(self, id: str) -> Optional[T]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error("Error getting %s by id %s: %s", self.model.__name__, id, e)
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {e}")

    def create(self, **kwargs) -> T:
        """
        Add a new row and flush so its defaults and ID are populated.

        Does NOT commit.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            raise self._integrity_error("creating", exc) from exc
        except SQLAlchemyError as e:
            self.logger.error("Error creating %s: %s", self.model.__name__, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {e}")

    def flush(self) -> None:
        """Flush pending ORM changes, translating constraint violations."""
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise self._integrity_error("flushing", exc) from exc

    def apply_updates(self, entity: T, **kwargs) -> T:
        """Set the given attributes on a loaded entity and flush. Unknown names are ignored."""
        for key, value in kwargs.items():
            if hasattr(entity, key):
                setattr(entity, key, value)
        self.flush()
        return entity

    def delete(self, id: str) -> bool:
        """Hard delete by primary key. Returns False when the row does not exist."""
        entity = self.get_by_id(id)
        if entity is None:
            return False
        try:
            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as exc:
            raise self._integrity_error("deleting", exc) from exc

    def exists(self, **criteria) -> bool:
        return self.find_one_by(**criteria) is not None

    def find_one_by(self, **criteria) -> Optional[T]:
        """First row matching exact-match criteria."""
        try:
            return self.db.query(self.model).filter_by(**criteria).first()
        except SQLAlchemyError as e:
            self.logger.error("Error finding %s by %s: %s", self.model.__name__, criteria, e)
            raise RepositoryException(f"Failed to find record: {e}")

    # Protected helper methods for use by subclasses

    def _paginate(self, query: Query, page: int, limit: int) -> Page[T]:
        """Run a count and a windowed fetch for the given 1-based page."""
        try:
            total = query.order_by(None).count()
            items = query.offset((page - 1) * limit).limit(limit).all()
            return Page(items=items, total=total, page=page, limit=limit)
        except SQLAlchemyError as e:
            self.logger.error("Query execution error: %s", e)
            raise RepositoryException(f"Query failed: {e}")

    def _execute_query(self, query: Query) -> List[T]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error("Query execution error: %s", e)
            raise RepositoryException(f"Query failed: {e}")
