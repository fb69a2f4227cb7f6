# backend/app/schemas/__init__.py
"""
Pydantic schemas for the Spyke marketplace.

Response models serialize to camelCase; request models accept camelCase or
snake_case and reject unknown fields.
"""

from .base import ApiResponse, CamelModel, PaginationMeta, RequestModel

__all__ = ["ApiResponse", "CamelModel", "PaginationMeta", "RequestModel"]
