# backend/app/repositories/factory.py
"""
Repository Factory for the Spyke marketplace.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING, Type

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from ..models.taxonomy import TaxonomyMixin
    from .analytics_event_repository import AnalyticsEventRepository
    from .cart_repository import CartRepository
    from .engagement_repository import ReactionRepository, ReviewRepository
    from .product_repository import ProductRepository
    from .promocode_repository import PromocodeRepository
    from .purchase_repository import PurchaseRepository
    from .taxonomy_repository import TaxonomyRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations in tests.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_taxonomy_repository(db: Session, model: Type["TaxonomyMixin"]) -> "TaxonomyRepository":
        """Create repository for one of the category, industry or tool tables."""
        from .taxonomy_repository import TaxonomyRepository

        return TaxonomyRepository(db, model)

    @staticmethod
    def create_product_repository(db: Session) -> "ProductRepository":
        from .product_repository import ProductRepository

        return ProductRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> "ReviewRepository":
        from .engagement_repository import ReviewRepository

        return ReviewRepository(db)

    @staticmethod
    def create_reaction_repository(db: Session) -> "ReactionRepository":
        """Create repository for favorite and upvote rows."""
        from .engagement_repository import ReactionRepository

        return ReactionRepository(db)

    @staticmethod
    def create_promocode_repository(db: Session) -> "PromocodeRepository":
        from .promocode_repository import PromocodeRepository

        return PromocodeRepository(db)

    @staticmethod
    def create_cart_repository(db: Session) -> "CartRepository":
        from .cart_repository import CartRepository

        return CartRepository(db)

    @staticmethod
    def create_purchase_repository(db: Session) -> "PurchaseRepository":
        from .purchase_repository import PurchaseRepository

        return PurchaseRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_analytics_event_repository(db: Session) -> "AnalyticsEventRepository":
        """Create repository for ingested client analytics events."""
        from .analytics_event_repository import AnalyticsEventRepository

        return AnalyticsEventRepository(db)
