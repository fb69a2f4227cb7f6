"""Python client for the Spyke AI marketplace."""

from .analytics import Analytics
from .api import (
    AdminApi,
    AnalyticsApi,
    AuthApi,
    CartApi,
    CategoriesApi,
    IndustriesApi,
    ProductsApi,
    PromocodeApi,
    PurchaseApi,
    ToolsApi,
)
from .api_client import ApiClient
from .config import Settings
from .errors import ApiError, ErrorInfo, ErrorType, handle_error
from .sinks import BackendSink, EventSink, RecordingSink
from .storage import AnalyticsStorage, LocalStorage
from .utils import sanitize_properties

__all__ = [
    "AdminApi",
    "Analytics",
    "AnalyticsApi",
    "AnalyticsStorage",
    "ApiClient",
    "ApiError",
    "AuthApi",
    "BackendSink",
    "CartApi",
    "CategoriesApi",
    "ErrorInfo",
    "ErrorType",
    "EventSink",
    "IndustriesApi",
    "LocalStorage",
    "ProductsApi",
    "PromocodeApi",
    "PurchaseApi",
    "RecordingSink",
    "Settings",
    "ToolsApi",
    "handle_error",
    "sanitize_properties",
]
