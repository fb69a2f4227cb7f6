"""HTTP client for the Spyke marketplace API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Iterable, Mapping

import httpx

from .config import Settings
from .errors import ApiError
from .storage import LocalStorage

logger = logging.getLogger(__name__)

TOKEN_KEYS = ("authToken", "accessToken")
SESSION_KEYS = ("authToken", "accessToken", "refreshToken", "user", "roles", "loginTime")
SIGNIN_PATH = "/signin"

# 401s from these endpoints are reported inline; the session is left alone
INLINE_AUTH_PATHS = ("/auth/login", "/purchase/cart")


class ApiClient:
    """
    Thin wrapper over httpx that speaks the API's response envelope.

    Successful calls return the decoded envelope. Failures raise ApiError:
    status 0 for transport errors, 408 for timeouts, otherwise the response
    status with the message and field errors from the error envelope.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        storage: LocalStorage | None = None,
        http: httpx.AsyncClient | None = None,
        on_unauthorized: Callable[[str], Any] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.storage = storage or LocalStorage(self.settings.storage_path)
        self.base_url = self.settings.api_url.rstrip("/")
        self.default_headers = {"Content-Type": "application/json"}
        self.on_unauthorized = on_unauthorized
        self.http = http or httpx.AsyncClient(timeout=httpx.Timeout(self.settings.request_timeout))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    # Session

    def get_current_token(self) -> str | None:
        for key in TOKEN_KEYS:
            token = self.storage.get_item(key)
            if token:
                return token
        return None

    def get_auth_headers(self) -> dict[str, str]:
        token = self.get_current_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def is_authenticated(self) -> bool:
        return self.get_current_token() is not None

    def set_auth_token(self, token: str | None) -> None:
        if token:
            self.storage.set_item("authToken", token)
        else:
            self.storage.remove_item("authToken")

    def store_session(
        self,
        token: str,
        user: Mapping[str, Any] | None = None,
        roles: Iterable[str] | None = None,
        refresh_token: str | None = None,
        login_time: str | None = None,
    ) -> None:
        self.set_auth_token(token)
        if refresh_token:
            self.storage.set_item("refreshToken", refresh_token)
        if user is not None:
            self.storage.set_json("user", dict(user))
        if roles is None and user is not None:
            roles = user.get("roles")
        if roles is not None:
            self.storage.set_json("roles", list(roles))
        if login_time:
            self.storage.set_item("loginTime", login_time)

    def clear_session(self) -> None:
        for key in SESSION_KEYS:
            self.storage.remove_item(key)

    # Requests

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        url = self.build_url(endpoint)
        request_headers = {**self.default_headers, **self.get_auth_headers(), **(headers or {})}
        query = {k: v for k, v in (params or {}).items() if v is not None} or None
        try:
            response = await self.http.request(
                method,
                url,
                params=query,
                json=json_body,
                headers=request_headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            raise ApiError(408, "Request timeout", timeout=True) from exc
        except httpx.HTTPError as exc:
            logger.warning("API request %s %s failed: %s", method, url, exc)
            raise ApiError(0, f"Network error: {exc}") from exc
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except json.JSONDecodeError:
                return response.text

        try:
            body = response.json()
        except json.JSONDecodeError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        errors = body.get("errors") or {}

        if response.status_code == 401:
            path = response.request.url.path
            if any(part in path for part in INLINE_AUTH_PATHS):
                raise ApiError(401, body.get("message") or "Login failed", data=body, errors=errors)

            self.clear_session()
            if self.on_unauthorized is not None:
                self.on_unauthorized(SIGNIN_PATH)
            raise ApiError(
                401,
                body.get("message") or "Authentication required. Please log in.",
                data=body,
                errors=errors,
                auth_error=True,
            )

        raise ApiError(
            response.status_code,
            body.get("message") or "An error occurred",
            data=body,
            errors=errors,
        )

    async def get(self, endpoint: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self.request("GET", endpoint, params=params, **kwargs)

    async def post(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", endpoint, json_body=data if data is not None else {}, **kwargs)

    async def put(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", endpoint, json_body=data if data is not None else {}, **kwargs)

    async def patch(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", endpoint, json_body=data, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)

    async def request_with_timeout(
        self, method: str, endpoint: str, timeout: float = 30.0, **kwargs: Any
    ) -> Any:
        return await self.request(method, endpoint, timeout=timeout, **kwargs)

    async def batch(self, requests: Iterable[Mapping[str, Any]]) -> list[Any]:
        """Run several requests concurrently; the first failure is raised."""
        calls = []
        for item in requests:
            method = str(item.get("method", "GET")).upper()
            if method not in {"GET", "POST", "PUT", "PATCH", "DELETE"}:
                raise ValueError(f"Unknown method: {method}")
            calls.append(
                self.request(
                    method,
                    item["endpoint"],
                    json_body=item.get("data"),
                    params=item.get("params"),
                    headers=item.get("headers"),
                )
            )
        return list(await asyncio.gather(*calls))
