"""Marketplace listing model."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..core.constants import PRODUCT_SHORT_DESCRIPTION_MAX_LENGTH, PRODUCT_TITLE_MAX_LENGTH
from ..core.enums import ProductStatus, ProductType
from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .engagement import ProductReaction, ProductReview
    from .taxonomy import Category, Industry, Tool
    from .user import User


product_tools = Table(
    "product_tools",
    Base.metadata,
    Column("product_id", String(26), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("tool_id", String(26), ForeignKey("tools.id", ondelete="CASCADE"), primary_key=True),
)


class Product(Base):
    """
    A prompt, automation, agent or bundle offered by a seller.

    Category, industry and tools are references into the taxonomy tables.
    Their product_count columns track how many PUBLISHED products point at
    them; the service layer moves those counters on every status change.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    title: Mapped[str] = mapped_column(String(PRODUCT_TITLE_MAX_LENGTH), nullable=False)
    slug: Mapped[str] = mapped_column(String(160), unique=True, nullable=False, index=True)
    short_description: Mapped[str] = mapped_column(
        String(PRODUCT_SHORT_DESCRIPTION_MAX_LENGTH), nullable=False
    )
    # case-folded title and short description for text search
    search_key: Mapped[str] = mapped_column(Text, nullable=False, default="")
    full_description: Mapped[Optional[str]] = mapped_column(Text)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500))
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    preview_video: Mapped[Optional[str]] = mapped_column(String(500))
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProductType.PROMPT.value, index=True
    )

    category_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("categories.id"), nullable=False, index=True
    )
    industry_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("industries.id"), nullable=False, index=True
    )

    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    original_price: Mapped[Optional[float]] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    seller_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProductStatus.DRAFT.value, index=True
    )

    setup_time: Mapped[Optional[str]] = mapped_column(String(50))
    target_audience: Mapped[Optional[str]] = mapped_column(Text)
    benefits: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    use_case_examples: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    how_it_works: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    outcome: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    faqs: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    versions: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    current_version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0.0")
    premium_content: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    has_refund_policy: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sales: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    favorites: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # moderation
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_tested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    review_message: Mapped[Optional[str]] = mapped_column(Text)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text)

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    category: Mapped["Category"] = relationship("Category", lazy="joined")
    industry: Mapped["Industry"] = relationship("Industry", lazy="joined")
    tools: Mapped[List["Tool"]] = relationship("Tool", secondary=product_tools, lazy="selectin")
    seller: Mapped["User"] = relationship("User", lazy="joined")
    reviews: Mapped[List["ProductReview"]] = relationship(
        "ProductReview", cascade="all, delete-orphan", lazy="select"
    )
    reactions: Mapped[List["ProductReaction"]] = relationship(
        "ProductReaction", cascade="all, delete-orphan", lazy="select"
    )

    @validates("title", "short_description")
    def _sync_search_key(self, key: str, value: str) -> str:
        title = value if key == "title" else self.title
        summary = value if key == "short_description" else self.short_description
        self.search_key = "\n".join(part for part in (title, summary) if part).casefold()
        return value

    @property
    def is_published(self) -> bool:
        return self.status == ProductStatus.PUBLISHED.value

    @property
    def tool_ids(self) -> List[str]:
        return [tool.id for tool in self.tools]

    def __repr__(self) -> str:
        return f"<Product {self.slug} status={self.status}>"
