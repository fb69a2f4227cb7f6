from __future__ import annotations

from typing import Any

from .base import ResourceApi


class ProductsApi(ResourceApi):
    path = "/v1/products"

    async def list(self, **filters: Any) -> Any:
        """Published products. Filters use the API's query names (minPrice, sortBy, ...)."""
        return self.data(await self.client.get(self.url(), params=filters))

    async def my_products(self, *, page: int = 1, limit: int = 20, status: str | None = None) -> Any:
        params = {"page": page, "limit": limit, "status": status}
        return self.data(await self.client.get(self.url("seller", "my-products"), params=params))

    async def get(self, identifier: str) -> Any:
        return self.data(await self.client.get(self.url(identifier)))

    async def create(self, payload: dict[str, Any]) -> Any:
        return self.data(await self.client.post(self.url(), payload))

    async def update(self, identifier: str, payload: dict[str, Any]) -> Any:
        return self.data(await self.client.put(self.url(identifier), payload))

    async def delete(self, identifier: str) -> Any:
        return self.data(await self.client.delete(self.url(identifier)))

    async def publish(self, identifier: str) -> Any:
        return self.data(await self.client.post(self.url(identifier, "publish")))

    async def unpublish(self, identifier: str) -> Any:
        return self.data(await self.client.post(self.url(identifier, "unpublish")))

    async def set_featured(self, identifier: str, is_featured: bool = True) -> Any:
        return self.data(
            await self.client.put(self.url(identifier, "featured"), {"isFeatured": is_featured})
        )

    async def related(self, identifier: str, *, limit: int = 6) -> Any:
        return self.data(await self.client.get(self.url(identifier, "related"), params={"limit": limit}))

    # moderation

    async def submit_for_review(self, identifier: str, message: str | None = None) -> Any:
        body = {"message": message} if message else None
        return self.data(await self.client.post(self.url(identifier, "submit-for-review"), body))

    async def verify(self, identifier: str, *, is_verified: bool, is_tested: bool) -> Any:
        payload = {"isVerified": is_verified, "isTested": is_tested}
        return self.data(await self.client.post(self.url(identifier, "verify"), payload))

    async def update_status(self, identifier: str, status: str, reason: str | None = None) -> Any:
        payload: dict[str, Any] = {"status": status}
        if reason:
            payload["reason"] = reason
        return self.data(await self.client.patch(self.url(identifier, "status"), payload))

    async def admin_list(self, *, page: int = 1, limit: int = 20, status: str | None = None) -> Any:
        params = {"page": page, "limit": limit, "status": status}
        return self.data(await self.client.get(self.url("admin", "all"), params=params))

    # feedback

    async def review(self, identifier: str, rating: int, comment: str | None = None) -> Any:
        payload: dict[str, Any] = {"rating": rating}
        if comment:
            payload["comment"] = comment
        return self.data(await self.client.post(self.url(identifier, "review"), payload))

    async def reviews(self, identifier: str, *, page: int = 1, limit: int = 20) -> Any:
        params = {"page": page, "limit": limit}
        return self.data(await self.client.get(self.url(identifier, "reviews"), params=params))

    async def favorite(self, identifier: str, is_favorited: bool = True) -> Any:
        return self.data(
            await self.client.post(self.url(identifier, "favorite"), {"isFavorited": is_favorited})
        )

    async def upvote(self, identifier: str, is_upvoted: bool = True) -> Any:
        return self.data(
            await self.client.post(self.url(identifier, "upvote"), {"isUpvoted": is_upvoted})
        )

    # discovery

    async def featured(self, *, limit: int = 12, **filters: Any) -> Any:
        """Filters: category, type, minRating."""
        params = {"limit": limit, **filters}
        return self.data(await self.client.get(self.url("featured"), params=params))

    async def trending(self, *, limit: int = 8, days: int = 7) -> Any:
        params = {"limit": limit, "days": days}
        return self.data(await self.client.get(self.url("trending"), params=params))

    async def high_rated(self, *, limit: int = 6, min_reviews: int = 3) -> Any:
        params = {"limit": limit, "minReviews": min_reviews}
        return self.data(await self.client.get(self.url("high-rated"), params=params))

    async def recently_added(self, *, limit: int = 6, days: int = 30) -> Any:
        params = {"limit": limit, "days": days}
        return self.data(await self.client.get(self.url("recent"), params=params))

    async def discovery(self) -> Any:
        return self.data(await self.client.get(self.url("discovery")))
