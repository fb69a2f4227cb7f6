"""Data access for purchases."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import PaymentStatus
from ..models.product import Product
from ..models.purchase import Purchase, PurchaseItem
from .base_repository import BaseRepository, Page


class PurchaseRepository(BaseRepository[Purchase]):
    def __init__(self, db: Session):
        super().__init__(db, Purchase)

    def has_purchased(self, user_id: str, product_id: str) -> bool:
        """True when a completed purchase grants the user access to the product."""
        return (
            self.db.query(PurchaseItem.id)
            .join(Purchase, Purchase.id == PurchaseItem.purchase_id)
            .filter(
                Purchase.user_id == user_id,
                Purchase.payment_status == PaymentStatus.COMPLETED.value,
                PurchaseItem.product_id == product_id,
                PurchaseItem.access_granted.is_(True),
            )
            .first()
            is not None
        )

    def purchased_product_ids(self, user_id: str, product_ids: List[str]) -> List[str]:
        if not product_ids:
            return []
        rows = (
            self.db.query(PurchaseItem.product_id)
            .join(Purchase, Purchase.id == PurchaseItem.purchase_id)
            .filter(
                Purchase.user_id == user_id,
                Purchase.payment_status == PaymentStatus.COMPLETED.value,
                PurchaseItem.access_granted.is_(True),
                PurchaseItem.product_id.in_(product_ids),
            )
            .all()
        )
        return [row[0] for row in rows]

    def product_has_purchases(self, product_id: str) -> bool:
        return self.db.query(PurchaseItem.id).filter(PurchaseItem.product_id == product_id).first() is not None

    def list_for_user(self, user_id: str, *, page: int, limit: int, product_type: Optional[str] = None) -> Page[Purchase]:
        query = self.db.query(Purchase).filter(Purchase.user_id == user_id)
        if product_type:
            query = query.filter(
                Purchase.id.in_(
                    self.db.query(PurchaseItem.purchase_id)
                    .join(Product, Product.id == PurchaseItem.product_id)
                    .filter(Product.type == product_type)
                )
            )
        return self._paginate(query.order_by(Purchase.purchase_date.desc(), Purchase.id.asc()), page, limit)

    def accessible_items(self, user_id: str) -> List[PurchaseItem]:
        return self._execute_query(
            self.db.query(PurchaseItem)
            .join(Purchase, Purchase.id == PurchaseItem.purchase_id)
            .filter(Purchase.user_id == user_id, PurchaseItem.access_granted.is_(True))
        )
