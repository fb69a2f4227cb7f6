"""Promocodes, the cart and purchases."""

from __future__ import annotations

from typing import Any, Iterable

from ..errors import ApiError
from .base import ResourceApi


class PromocodeApi(ResourceApi):
    path = "/v1/promocode"

    async def create(self, payload: dict[str, Any]) -> Any:
        return self.data(await self.client.post(self.url(), payload))

    async def list(self, **params: Any) -> Any:
        return self.data(await self.client.get(self.url(), params=params))

    async def public(self, *, page: int = 1, limit: int = 10) -> Any:
        return self.data(await self.client.get(self.url("public"), params={"page": page, "limit": limit}))

    async def applicable(self, product_ids: Iterable[str]) -> Any:
        params = {"productIds": ",".join(product_ids)}
        return self.data(await self.client.get(self.url("applicable"), params=params))

    async def validate(self, code: str) -> Any:
        return self.data(await self.client.get(self.url("validate", code)))

    async def get(self, id: str) -> Any:
        return self.data(await self.client.get(self.url(id)))

    async def update(self, id: str, payload: dict[str, Any]) -> Any:
        return self.data(await self.client.put(self.url(id), payload))

    async def delete(self, id: str) -> Any:
        return self.data(await self.client.delete(self.url(id)))

    async def toggle_status(self, id: str) -> Any:
        return self.data(await self.client.patch(self.url(id, "toggle-status")))

    async def stats(self, id: str) -> Any:
        return self.data(await self.client.get(self.url(id, "stats")))


class CartApi(ResourceApi):
    path = "/v1/purchase/cart"

    async def get(self) -> Any:
        """The caller's cart; signed-out callers get an empty one."""
        try:
            return self.data(await self.client.get(self.url()))
        except ApiError as e:
            if e.status == 401:
                return {"items": [], "totalItems": 0, "totalAmount": 0}
            raise

    async def add(self, product_id: str) -> Any:
        return self.data(await self.client.post(self.url("add"), {"productId": product_id}))

    async def remove(self, product_id: str) -> Any:
        return self.data(await self.client.delete(self.url("remove", product_id)))

    async def clear(self) -> Any:
        return self.data(await self.client.delete(self.url("clear")))

    async def apply_promocode(self, code: str) -> Any:
        return self.data(await self.client.post(self.url("promocode"), {"code": code}))

    async def remove_promocode(self) -> Any:
        return self.data(await self.client.delete(self.url("promocode")))


class PurchaseApi(ResourceApi):
    path = "/v1/purchase"

    async def checkout(
        self, *, payment_method: str | None = None, payment_reference: str | None = None
    ) -> Any:
        payload = {
            key: value
            for key, value in {
                "paymentMethod": payment_method,
                "paymentReference": payment_reference,
            }.items()
            if value is not None
        }
        return self.data(await self.client.post(self.url("create"), payload))

    async def my_purchases(self, *, page: int = 1, limit: int = 20, type: str | None = None) -> Any:
        params = {"page": page, "limit": limit, "type": type}
        return self.data(await self.client.get(self.url("my-purchases"), params=params))

    async def access(self, product_id: str) -> Any:
        return self.data(await self.client.get(self.url("access", product_id)))

    async def complete(self, purchase_id: str) -> Any:
        return self.data(await self.client.patch(self.url(purchase_id, "complete")))

    async def refund(self, purchase_id: str, *, amount: float | None = None, reason: str | None = None) -> Any:
        payload = {key: value for key, value in {"amount": amount, "reason": reason}.items() if value is not None}
        return self.data(await self.client.patch(self.url(purchase_id, "refund"), payload))
