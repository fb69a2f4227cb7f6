# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the Spyke marketplace.

Services raise these; routes convert them to HTTP errors and the
envelope handlers in app.errors render them.
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, status

class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the subclass status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Bad input that passed schema validation (self-purchase, expired code, ...)."""

    status_code = status.HTTP_400_BAD_REQUEST


class BusinessRuleException(DomainException):
    """Well-formed request the current state of the resource cannot accept."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundException(DomainException):
    """Unknown id, slug or code."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Duplicate email, slug or other unique value."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Bad credentials or a deactivated account."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Authenticated, but not the owner and not an admin."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def __init__(
        self,
        message: str = "An error occurred processing your request",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class RateLimitException(DomainException):
    """Raised when a caller exceeds its request window."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message, details={"retry_after": retry_after})
        self.retry_after = retry_after

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"Retry-After": str(self.retry_after)}
        return exc


class RepositoryException(Exception):
    """Data access failed below the service layer."""


class IntegrityConstraintException(RepositoryException):
    """Raised when a unique or foreign-key constraint rejects a write."""


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()
