# backend/app/routes/v1/categories.py
"""Category routes - API v1, mounted at /v1/categories."""

from ...models.taxonomy import Category
from ...schemas.taxonomy import (
    CategoryListResponse,
    CategoryResponse,
    TaxonomyCreate,
    TaxonomyUpdate,
)
from .taxonomy import build_taxonomy_router

router = build_taxonomy_router(
    model=Category,
    tag="categories-v1",
    plural="categories",
    create_schema=TaxonomyCreate,
    update_schema=TaxonomyUpdate,
    response_schema=CategoryResponse,
    list_schema=CategoryListResponse,
)
