"""Authentication and admin account management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .base import ResourceApi


class AuthApi(ResourceApi):
    path = "/v1/auth"

    async def register(
        self, name: str, email: str, password: str, *, become_seller: bool = False
    ) -> Any:
        payload = {"name": name, "email": email, "password": password, "becomeSeller": become_seller}
        return self.data(await self.client.post(self.url("register"), payload))

    async def login(self, email: str, password: str) -> Any:
        """Sign in and persist the session for later calls."""
        result = self.data(
            await self.client.post(self.url("login"), {"email": email, "password": password})
        )
        user = result.get("user") or {}
        self.client.store_session(
            result["accessToken"],
            user=user,
            roles=user.get("roles"),
            login_time=datetime.now(timezone.utc).isoformat(),
        )
        return result

    def logout(self) -> None:
        self.client.clear_session()

    async def me(self) -> Any:
        return self.data(await self.client.get(self.url("me")))


class AdminApi(ResourceApi):
    path = "/v1/admin"

    async def list_users(
        self, *, page: int = 1, limit: int = 20, search: str | None = None, role: str | None = None
    ) -> Any:
        params = {"page": page, "limit": limit, "search": search, "role": role}
        return self.data(await self.client.get(self.url("users"), params=params))

    async def suspend_user(self, user_id: str) -> Any:
        return self.data(await self.client.patch(self.url("users", user_id, "suspend")))

    async def activate_user(self, user_id: str) -> Any:
        return self.data(await self.client.patch(self.url("users", user_id, "activate")))
