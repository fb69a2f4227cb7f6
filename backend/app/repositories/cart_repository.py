"""Data access for shopping carts."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.cart import Cart, CartItem
from .base_repository import BaseRepository


class CartRepository(BaseRepository[Cart]):
    def __init__(self, db: Session):
        super().__init__(db, Cart)

    def get_for_user(self, user_id: str) -> Optional[Cart]:
        return self.find_one_by(user_id=user_id)

    def get_or_create(self, user_id: str) -> Cart:
        cart = self.get_for_user(user_id)
        if cart is None:
            cart = self.create(user_id=user_id)
        return cart

    def add_item(self, cart: Cart, product_id: str) -> CartItem:
        item = CartItem(product_id=product_id)
        cart.items.append(item)
        self.flush()
        return item

    def remove_item(self, cart: Cart, product_id: str) -> bool:
        before = len(cart.items)
        cart.items = [item for item in cart.items if item.product_id != product_id]
        self.flush()
        return len(cart.items) != before

    def clear(self, cart: Cart) -> None:
        cart.items = []
        cart.total_amount = 0.0
        cart.final_amount = 0.0
        cart.clear_promocode()
        self.flush()
