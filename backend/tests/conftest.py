# backend/tests/conftest.py
"""
Pytest configuration for the Spyke marketplace API.

Every test gets a fresh in-memory SQLite database. The FastAPI app shares
that session through a get_db override, so route tests and direct service
calls observe the same rows.
"""

import os

# Environment must be set before any app imports
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-spyke-marketplace"

from datetime import timedelta
from typing import Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  registers every mapper
from app.auth import create_access_token, get_password_hash
from app.core.config import settings
from app.core.enums import ProductStatus, RoleName
from app.core.timezone_utils import utc_now
from app.database import Base, get_db
from app.main import app
from app.middleware.rate_limiter import get_rate_limiter
from app.models.product import Product
from app.models.promocode import Promocode
from app.models.taxonomy import Category, Industry, Tool
from app.models.user import User

settings.rate_limit_enabled = False

TEST_PASSWORD = "TestPassword123!"


@pytest.fixture(scope="function")
def db():
    """Create a new database session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db: Session):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    get_rate_limiter().reset()

    # Don't use context manager - lifespan would create tables on the app engine
    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()


def _make_user(db: Session, email: str, name: str, roles) -> User:
    user = User(
        email=email,
        name=name,
        hashed_password=get_password_hash(TEST_PASSWORD),
        roles=roles,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_password() -> str:
    """Standard test password for all test users."""
    return TEST_PASSWORD


@pytest.fixture
def buyer(db: Session) -> User:
    return _make_user(db, "buyer@example.com", "Test Buyer", [RoleName.USER.value])


@pytest.fixture
def seller(db: Session) -> User:
    return _make_user(
        db, "seller@example.com", "Test Seller", [RoleName.USER.value, RoleName.SELLER.value]
    )


@pytest.fixture
def other_seller(db: Session) -> User:
    return _make_user(
        db, "seller2@example.com", "Second Seller", [RoleName.USER.value, RoleName.SELLER.value]
    )


@pytest.fixture
def admin(db: Session) -> User:
    return _make_user(
        db, "admin@example.com", "Test Admin", [RoleName.USER.value, RoleName.ADMIN.value]
    )


def _headers(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": user.id}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_buyer(buyer: User) -> Dict[str, str]:
    return _headers(buyer)


@pytest.fixture
def auth_headers_seller(seller: User) -> Dict[str, str]:
    return _headers(seller)


@pytest.fixture
def auth_headers_other_seller(other_seller: User) -> Dict[str, str]:
    return _headers(other_seller)


@pytest.fixture
def auth_headers_admin(admin: User) -> Dict[str, str]:
    return _headers(admin)


@pytest.fixture
def category(db: Session) -> Category:
    entity = Category(name="Marketing")
    db.add(entity)
    db.commit()
    return entity


@pytest.fixture
def industry(db: Session) -> Industry:
    entity = Industry(name="E-commerce")
    db.add(entity)
    db.commit()
    return entity


@pytest.fixture
def tool(db: Session) -> Tool:
    entity = Tool(name="ChatGPT", description="OpenAI chat assistant")
    db.add(entity)
    db.commit()
    return entity


@pytest.fixture
def make_product(db: Session, seller: User, category: Category, industry: Industry, tool: Tool):
    """Factory for products inserted directly, bypassing counter bookkeeping."""

    def _make(
        title: str = "Cold Email Prompt Pack",
        price: float = 20.0,
        status: str = ProductStatus.PUBLISHED.value,
        owner: User = None,
        **overrides,
    ) -> Product:
        slug = overrides.pop("slug", title.lower().replace(" ", "-"))
        product = Product(
            title=title,
            slug=slug,
            short_description="Prompts that book meetings",
            price=price,
            category_id=overrides.pop("category_id", category.id),
            industry_id=overrides.pop("industry_id", industry.id),
            seller_id=(owner or seller).id,
            status=status,
            premium_content=overrides.pop("premium_content", {"promptText": "You are a sales expert"}),
            **overrides,
        )
        product.tools = [tool]
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_promocode(db: Session, admin: User):
    def _make(code: str = "SAVE10", **overrides) -> Promocode:
        fields = dict(
            code=code,
            created_by=admin.id,
            created_by_type="admin",
            discount_type="percentage",
            discount_value=10,
            valid_from=utc_now() - timedelta(days=1),
            valid_until=utc_now() + timedelta(days=30),
            is_public=True,
        )
        fields.update(overrides)
        promocode = Promocode(**fields)
        db.add(promocode)
        db.commit()
        return promocode

    return _make
