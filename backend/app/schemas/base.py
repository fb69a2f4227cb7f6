"""
Base schemas shared by every endpoint.

JSON field names are camelCase on the wire; request bodies also accept the
snake_case attribute names. Successful responses are wrapped in ApiResponse.
"""

from typing import Generic, Optional, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.constants import ResponseMessage

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model with camelCase aliases, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class RequestModel(CamelModel):
    """Request body base that rejects unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="forbid",
    )


class RequestInfo(BaseModel):
    method: str
    url: str

    @classmethod
    def from_request(cls, request: Request) -> "RequestInfo":
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        return cls(method=request.method, url=url)


class ApiResponse(CamelModel, Generic[T]):
    """Uniform success envelope."""

    success: bool = True
    status_code: int = 200
    request: RequestInfo
    message: str = ResponseMessage.SUCCESS
    data: Optional[T] = None

    @classmethod
    def build(
        cls,
        request: Request,
        data: Optional[T] = None,
        message: str = ResponseMessage.SUCCESS,
        status_code: int = 200,
    ) -> "ApiResponse[T]":
        return cls(
            success=True,
            status_code=status_code,
            request=RequestInfo.from_request(request),
            message=message,
            data=data,
        )


class PaginationMeta(CamelModel):
    """Page-number pagination block used by listing endpoints."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_page(cls, page) -> "PaginationMeta":
        return cls(
            current_page=page.page,
            total_pages=page.total_pages,
            total_items=page.total,
            items_per_page=page.limit,
            has_next_page=page.has_next,
            has_prev_page=page.has_prev,
        )
