# backend/app/core/enums.py
"""
Core enums for the Spyke marketplace.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles a user account can hold. Every account has USER."""

    ADMIN = "admin"
    SELLER = "seller"
    USER = "user"


class ProductType(str, Enum):
    PROMPT = "prompt"
    AUTOMATION = "automation"
    AGENT = "agent"
    BUNDLE = "bundle"


class ProductStatus(str, Enum):
    """Lifecycle of a listing. Only PUBLISHED products count toward taxonomy totals."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    REJECTED = "rejected"


class ReactionKind(str, Enum):
    """Per-user toggles on a product; each kind backs one counter column."""

    FAVORITE = "favorite"
    UPVOTE = "upvote"


class OrderStatus(str, Enum):
    """Fulfilment state of a purchase, separate from its payment state."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CreatorType(str, Enum):
    ADMIN = "admin"
    SELLER = "seller"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class AnalyticsEventType(str, Enum):
    CUSTOM = "custom"
    PAGEVIEW = "pageview"
    CLICK = "click"
    FORM = "form"
    ERROR = "error"
    PERFORMANCE = "performance"


class StatsPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
