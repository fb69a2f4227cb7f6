"""Destinations for analytics batches."""

from __future__ import annotations

from typing import Any, Protocol

from .api_client import ApiClient

EVENTS_ENDPOINT = "/v1/analytics/events"


class EventSink(Protocol):
    async def send(self, events: list[dict[str, Any]]) -> None:
        """Deliver a batch; raising means nothing was delivered."""


class BackendSink:
    """Posts batches to the marketplace ingestion endpoint."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def send(self, events: list[dict[str, Any]]) -> None:
        await self.client.post(EVENTS_ENDPOINT, {"events": events})


class RecordingSink:
    """Keeps every delivered batch in memory. Set fail_next to reject upcoming sends."""

    def __init__(self) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self.fail_next = 0

    async def send(self, events: list[dict[str, Any]]) -> None:
        if self.fail_next:
            self.fail_next -= 1
            raise ConnectionError("sink unavailable")
        self.batches.append(list(events))

    @property
    def events(self) -> list[dict[str, Any]]:
        return [event for batch in self.batches for event in batch]
