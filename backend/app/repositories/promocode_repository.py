"""Data access for promocodes."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.promocode import Promocode
from .base_repository import BaseRepository, Page


class PromocodeRepository(BaseRepository[Promocode]):
    def __init__(self, db: Session):
        super().__init__(db, Promocode)

    def get_by_code(self, code: str) -> Optional[Promocode]:
        return self.find_one_by(code=code.strip().upper())

    def list_filtered(
        self,
        *,
        page: int,
        limit: int,
        seller_id: Optional[str] = None,
        created_by_type: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page[Promocode]:
        query = self.db.query(Promocode)
        if seller_id:
            query = query.filter(Promocode.seller_id == seller_id)
        if created_by_type:
            query = query.filter(Promocode.created_by_type == created_by_type)
        if is_active is not None:
            query = query.filter(Promocode.is_active.is_(is_active))
        return self._paginate(query.order_by(Promocode.created_at.desc(), Promocode.id.asc()), page, limit)

    def list_public(self, now: datetime, *, page: int, limit: int) -> Page[Promocode]:
        """Active public codes whose validity window contains now."""
        query = self.db.query(Promocode).filter(
            Promocode.is_active.is_(True),
            Promocode.is_public.is_(True),
            Promocode.valid_from <= now,
            Promocode.valid_until >= now,
        )
        return self._paginate(query.order_by(Promocode.created_at.desc(), Promocode.id.asc()), page, limit)

    def list_public_in_window(self, now: datetime) -> List[Promocode]:
        """Every active public code in its window, biggest discount first."""
        return self._execute_query(
            self.db.query(Promocode)
            .filter(
                Promocode.is_active.is_(True),
                Promocode.is_public.is_(True),
                Promocode.valid_from <= now,
                Promocode.valid_until >= now,
            )
            .order_by(Promocode.discount_value.desc(), Promocode.id.asc())
        )
