"""Application-wide constants for the Spyke marketplace."""

from __future__ import annotations

# API Documentation
BRAND_NAME = "Spyke AI"
API_TITLE = f"{BRAND_NAME} Marketplace API"
API_DESCRIPTION = f"Backend API for {BRAND_NAME} - a marketplace for AI prompts, automations and agents"
API_VERSION = "1.0.0"

# Taxonomy constraints
TAXONOMY_NAME_MIN_LENGTH = 2
TAXONOMY_NAME_MAX_LENGTH = 50
TOOL_DESCRIPTION_MAX_LENGTH = 500
DEFAULT_CATEGORY_ICON = "Package"
DEFAULT_INDUSTRY_ICON = "Building"
DEFAULT_TOOL_ICON = "Wrench"

# Product constraints
PRODUCT_TITLE_MAX_LENGTH = 120
PRODUCT_SHORT_DESCRIPTION_MAX_LENGTH = 200
REVIEW_COMMENT_MAX_LENGTH = 1000
REVIEW_MESSAGE_MAX_LENGTH = 500
HIGH_RATING_THRESHOLD = 4.0
FEATURED_MIN_RATING = 3.5

# Promocode constraints
PROMOCODE_MIN_LENGTH = 3
PROMOCODE_MAX_LENGTH = 20
PROMOCODE_DESCRIPTION_MAX_LENGTH = 200

# Query limits
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


class ResponseMessage:
    """Human readable messages placed in the response envelope."""

    SUCCESS = "The operation has been successful"
    CREATED = "The resource has been created successfully"
    UPDATED = "The resource has been updated successfully"
    DELETED = "The resource has been deleted successfully"

    SOMETHING_WENT_WRONG = "Something went wrong!"
    INTERNAL_SERVER_ERROR = "Internal server error"
    TOO_MANY_REQUESTS = "Too many requests! Please try again after some time"
    BAD_REQUEST = "Bad request"
    VALIDATION_FAILED = "Validation failed"

    UNAUTHORIZED = "You are not authorized to access this resource"
    FORBIDDEN = "You do not have permission to perform this action"
    TOKEN_INVALID = "Authentication token is invalid"
    LOGIN_SUCCESS = "Login successful"
    LOGIN_FAILED = "Invalid email or password"
    ACCOUNT_DEACTIVATED = "Account is deactivated"

    @staticmethod
    def service(name: str) -> str:
        return f"{name} service is running."

    @staticmethod
    def not_found(entity: str) -> str:
        return f"{entity} not found"

    @staticmethod
    def already_exists(entity: str) -> str:
        return f"{entity} already exists"

    @staticmethod
    def has_products(entity: str) -> str:
        return (
            f"Cannot delete {entity.lower()} that has products. "
            "Please reassign or remove products first."
        )
