# backend/app/routes/v1/industries.py
"""Industry routes - API v1, mounted at /v1/industries."""

from ...models.taxonomy import Industry
from ...schemas.taxonomy import (
    IndustryListResponse,
    IndustryResponse,
    TaxonomyCreate,
    TaxonomyUpdate,
)
from .taxonomy import build_taxonomy_router

router = build_taxonomy_router(
    model=Industry,
    tag="industries-v1",
    plural="industries",
    create_schema=TaxonomyCreate,
    update_schema=TaxonomyUpdate,
    response_schema=IndustryResponse,
    list_schema=IndustryListResponse,
)
