# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the Spyke marketplace.

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_taxonomy_repository(db, Category)
    active = repository.find_active()
"""

from .base_repository import BaseRepository, Page
from .factory import RepositoryFactory

__all__ = ["BaseRepository", "Page", "RepositoryFactory"]
