from __future__ import annotations

from typing import Any

from ..api_client import ApiClient


class ResourceApi:
    """Base for the endpoint wrappers; every call returns the envelope's data."""

    path = ""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def url(self, *parts: str) -> str:
        return "/".join([self.path, *parts]) if parts else self.path

    @staticmethod
    def data(response: Any) -> Any:
        if isinstance(response, dict) and "data" in response:
            return response["data"]
        return response
