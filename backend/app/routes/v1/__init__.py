# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /v1.
All new endpoints should be added here.
"""

from . import (
    admin,
    analytics,
    auth,
    categories,
    health,
    industries,
    products,
    promocode,
    purchase,
    tools,
)

__all__ = [
    "admin",
    "analytics",
    "auth",
    "categories",
    "health",
    "industries",
    "products",
    "promocode",
    "purchase",
    "tools",
]
