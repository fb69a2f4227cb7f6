# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, get_current_user_optional
from .authz import require_admin, require_roles, require_seller_or_admin

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "require_roles",
    "require_seller_or_admin",
]
