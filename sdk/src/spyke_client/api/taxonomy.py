"""Categories, industries and tools share one set of endpoints."""

from __future__ import annotations

from typing import Any

from .base import ResourceApi


class TaxonomyApi(ResourceApi):
    async def list(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        is_active: bool | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Any:
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "isActive": None if is_active is None else str(is_active).lower(),
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
        return self.data(await self.client.get(self.url(), params=params))

    async def active(self) -> Any:
        return self.data(await self.client.get(self.url("active")))

    async def get(self, id: str) -> Any:
        return self.data(await self.client.get(self.url(id)))

    async def create(self, payload: dict[str, Any]) -> Any:
        return self.data(await self.client.post(self.url(), payload))

    async def update(self, id: str, payload: dict[str, Any]) -> Any:
        return self.data(await self.client.put(self.url(id), payload))

    async def delete(self, id: str) -> Any:
        return self.data(await self.client.delete(self.url(id)))

    async def toggle_status(self, id: str) -> Any:
        return self.data(await self.client.patch(self.url(id, "toggle-status")))

    async def restore(self, id: str) -> Any:
        return self.data(await self.client.patch(self.url(id, "restore")))

    async def analytics(self) -> Any:
        return self.data(await self.client.get(self.url("analytics")))


class CategoriesApi(TaxonomyApi):
    path = "/v1/categories"


class IndustriesApi(TaxonomyApi):
    path = "/v1/industries"


class ToolsApi(TaxonomyApi):
    path = "/v1/tools"
