"""
Database models for the Spyke marketplace.

Importing this package registers every mapper on the declarative base:
- User accounts and roles
- Taxonomy (categories, industries, tools)
- Products, their reviews and reactions
- Promocodes and their usage history
- Carts and purchases
- Client analytics events
"""

from .analytics_event import AnalyticsEvent
from .cart import Cart, CartItem
from .engagement import ProductReaction, ProductReview
from .product import Product, product_tools
from .promocode import Promocode, PromocodeUsage
from .purchase import Purchase, PurchaseItem
from .taxonomy import Category, Industry, TaxonomyMixin, Tool
from .user import User

__all__ = [
    "AnalyticsEvent",
    "Cart",
    "CartItem",
    "Category",
    "Industry",
    "Product",
    "ProductReaction",
    "ProductReview",
    "Promocode",
    "PromocodeUsage",
    "Purchase",
    "PurchaseItem",
    "TaxonomyMixin",
    "Tool",
    "User",
    "product_tools",
]
