# backend/app/services/base.py
"""
Base Service Pattern for the Spyke marketplace.

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Error translation from the repository layer
- Slow operation warnings
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictException,
    IntegrityConstraintException,
    RepositoryException,
    ServiceException,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Services own the unit of work: repositories flush, services commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on success, roll back on any error.

        Usage:
            with self.transaction():
                self.repository.create(...)

        Integrity violations surface as ConflictException so callers get a 409.
        """
        try:
            yield self.db
            self.db.commit()
        except IntegrityConstraintException as e:
            self.db.rollback()
            raise ConflictException(str(e), code="DUPLICATE_ENTRY") from e
        except (RepositoryException, SQLAlchemyError) as e:
            self.logger.error("Transaction failed: %s", e)
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Warn when the decorated operation runs longer than a second.

        Usage:
            @BaseService.measure_operation("create_product")
            def create(self, user, data):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start_time = time.monotonic()
                try:
                    return func(self, *args, **kwargs)
                finally:
                    elapsed = time.monotonic() - start_time
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning("Slow operation: %s took %.2fs", operation_name, elapsed)

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context) -> None:
        self.logger.info("Operation: %s", operation, extra={"operation": operation, **context})
