"""
Schemas for categories, industries and tools.

Names are trimmed before length checks. isDeleted and deletedAt are never
part of a response.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints

from ..core.constants import (
    TAXONOMY_NAME_MAX_LENGTH,
    TAXONOMY_NAME_MIN_LENGTH,
    TOOL_DESCRIPTION_MAX_LENGTH,
)
from .base import CamelModel, PaginationMeta, RequestModel

TaxonomyName = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=TAXONOMY_NAME_MIN_LENGTH,
        max_length=TAXONOMY_NAME_MAX_LENGTH,
    ),
]
Icon = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
ToolDescription = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=TOOL_DESCRIPTION_MAX_LENGTH)
]


class TaxonomyCreate(RequestModel):
    name: TaxonomyName
    icon: Optional[Icon] = None
    is_active: bool = True


class TaxonomyUpdate(RequestModel):
    name: Optional[TaxonomyName] = None
    icon: Optional[Icon] = None
    is_active: Optional[bool] = None


class ToolCreate(TaxonomyCreate):
    description: Optional[ToolDescription] = None


class ToolUpdate(TaxonomyUpdate):
    description: Optional[ToolDescription] = None


class TaxonomyResponse(CamelModel):
    id: str
    name: str
    icon: str
    is_active: bool
    product_count: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryResponse(TaxonomyResponse):
    pass


class IndustryResponse(TaxonomyResponse):
    pass


class ToolResponse(TaxonomyResponse):
    description: Optional[str] = None


class CategoryListResponse(CamelModel):
    categories: List[CategoryResponse]
    pagination: PaginationMeta


class IndustryListResponse(CamelModel):
    industries: List[IndustryResponse]
    pagination: PaginationMeta


class ToolListResponse(CamelModel):
    tools: List[ToolResponse]
    pagination: PaginationMeta


class TaxonomyOverview(CamelModel):
    total: int
    active: int
    inactive: int
    deleted: int


class TaxonomyAnalyticsResponse(CamelModel):
    overview: TaxonomyOverview
    top_by_products: List[TaxonomyResponse]
    recent: List[TaxonomyResponse]
