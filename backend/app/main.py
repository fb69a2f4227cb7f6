# backend/app/main.py
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .middleware.rate_limiter import RateLimitMiddleware
from .routes.v1 import (
    admin as admin_v1,
    analytics as analytics_v1,
    auth as auth_v1,
    categories as categories_v1,
    health as health_v1,
    industries as industries_v1,
    products as products_v1,
    promocode as promocode_v1,
    purchase as purchase_v1,
    tools as tools_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if settings.secret_key.get_secret_value() == "change-me-in-production" and settings.is_production:
        logger.warning("SECRET_KEY is still the development default")

    await asyncio.to_thread(init_db)

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)
# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s allow_credentials=%s", settings.cors_origin_list, True)

# Create API v1 router
api_v1 = APIRouter(prefix="/v1")

# Note: static segments such as /products/seller/my-products are declared
# before /{identifier} inside each router
api_v1.include_router(health_v1.router)
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(categories_v1.router, prefix="/categories")
api_v1.include_router(industries_v1.router, prefix="/industries")
api_v1.include_router(tools_v1.router, prefix="/tools")
api_v1.include_router(products_v1.router, prefix="/products")
api_v1.include_router(promocode_v1.router, prefix="/promocode")
api_v1.include_router(purchase_v1.router, prefix="/purchase")
api_v1.include_router(analytics_v1.router, prefix="/analytics")
api_v1.include_router(admin_v1.router, prefix="/admin")

app.include_router(api_v1)
# Unversioned health check for load balancers
app.include_router(health_v1.router)

__all__ = ["app"]
