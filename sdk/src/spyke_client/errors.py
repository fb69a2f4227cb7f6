"""Client-side error types and the user-facing error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

import httpx


class ApiError(Exception):
    """Raised for every failed API call, whatever the cause."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        data: Any = None,
        errors: Any = None,
        auth_error: bool = False,
        timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data
        self.errors = errors if errors is not None else {}
        self.auth_error = auth_error
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


class ErrorType(str, Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorInfo:
    type: ErrorType
    message: str
    status: int | None = None
    can_retry: bool = False


DEFAULT_MESSAGES = {
    ErrorType.NETWORK: "Network error. Please check your connection and try again.",
    ErrorType.TIMEOUT: "The request timed out. Please try again.",
    ErrorType.VALIDATION: "Please check your input and try again.",
    ErrorType.AUTHENTICATION: "Please sign in to continue.",
    ErrorType.AUTHORIZATION: "You do not have permission to do that.",
    ErrorType.NOT_FOUND: "The requested resource was not found.",
    ErrorType.CONFLICT: "This resource already exists.",
    ErrorType.RATE_LIMIT: "Too many requests. Please slow down.",
    ErrorType.SERVER: "Something went wrong on our side. Please try again later.",
    ErrorType.UNKNOWN: "An unexpected error occurred.",
}

RETRYABLE = {ErrorType.NETWORK, ErrorType.TIMEOUT, ErrorType.RATE_LIMIT, ErrorType.SERVER}


def _classify(status: int | None, timeout: bool) -> ErrorType:
    if timeout or status == 408:
        return ErrorType.TIMEOUT
    if not status:
        return ErrorType.NETWORK
    if status in (400, 422):
        return ErrorType.VALIDATION
    if status == 401:
        return ErrorType.AUTHENTICATION
    if status == 403:
        return ErrorType.AUTHORIZATION
    if status == 404:
        return ErrorType.NOT_FOUND
    if status == 409:
        return ErrorType.CONFLICT
    if status == 429:
        return ErrorType.RATE_LIMIT
    if status >= 500:
        return ErrorType.SERVER
    return ErrorType.UNKNOWN


def handle_error(error: ApiError | Mapping[str, Any] | BaseException) -> ErrorInfo:
    """
    Map any client failure to an ErrorInfo suitable for display.

    Accepts an ApiError, a plain mapping with ``status``/``message``/``timeout``
    keys, or a raw exception (httpx transport errors count as network
    failures).
    """
    message: str | None
    if isinstance(error, ApiError):
        status, message, timeout = error.status, error.message, error.timeout
    elif isinstance(error, Mapping):
        status = error.get("status")
        message = error.get("message")
        timeout = bool(error.get("timeout"))
    else:
        status, message = None, None
        timeout = isinstance(error, (httpx.TimeoutException, TimeoutError))

    error_type = _classify(status, timeout)
    return ErrorInfo(
        type=error_type,
        message=message or DEFAULT_MESSAGES[error_type],
        status=status or None,
        can_retry=error_type in RETRYABLE,
    )
