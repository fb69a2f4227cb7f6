# backend/app/routes/v1/tools.py
"""Tool routes - API v1, mounted at /v1/tools. Tools carry a searchable description."""

from ...models.taxonomy import Tool
from ...schemas.taxonomy import ToolCreate, ToolListResponse, ToolResponse, ToolUpdate
from .taxonomy import build_taxonomy_router

router = build_taxonomy_router(
    model=Tool,
    tag="tools-v1",
    plural="tools",
    create_schema=ToolCreate,
    update_schema=ToolUpdate,
    response_schema=ToolResponse,
    list_schema=ToolListResponse,
)
