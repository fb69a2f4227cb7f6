from __future__ import annotations

from typing import Any, Iterable

from .base import ResourceApi


class AnalyticsApi(ResourceApi):
    path = "/v1/analytics"

    async def send_events(self, events: Iterable[dict[str, Any]]) -> Any:
        return self.data(await self.client.post(self.url("events"), {"events": list(events)}))

    async def get_events(
        self,
        *,
        type: str = "all",
        limit: int = 100,
        offset: int = 0,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Any:
        params = {
            "type": type,
            "limit": limit,
            "offset": offset,
            "startDate": start_date,
            "endDate": end_date,
        }
        return self.data(await self.client.get(self.url("events"), params=params))

    async def get_stats(self, period: str = "today") -> Any:
        return self.data(await self.client.get(self.url("stats"), params={"period": period}))

    async def clear_events(self) -> Any:
        return self.data(await self.client.delete(self.url("events")))
