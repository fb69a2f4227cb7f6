from .accounts import AdminApi, AuthApi
from .analytics import AnalyticsApi
from .base import ResourceApi
from .commerce import CartApi, PromocodeApi, PurchaseApi
from .products import ProductsApi
from .taxonomy import CategoriesApi, IndustriesApi, TaxonomyApi, ToolsApi

__all__ = [
    "AdminApi",
    "AnalyticsApi",
    "AuthApi",
    "CartApi",
    "CategoriesApi",
    "IndustriesApi",
    "ProductsApi",
    "PromocodeApi",
    "PurchaseApi",
    "ResourceApi",
    "TaxonomyApi",
    "ToolsApi",
]
