"""Helpers shared by the analytics pipeline."""

from __future__ import annotations

import re
import time
from typing import Any, Mapping

from ulid import ULID

SENSITIVE_KEYS = frozenset({"password", "token", "secret", "api_key", "apikey"})
CARD_NUMBER = re.compile(r"\b(?:\d{4}[\s-]?){3}\d{4}\b")
EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def generate_id() -> str:
    return str(ULID())


def now_ms() -> int:
    return int(time.time() * 1000)


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return EMAIL.sub("[EMAIL]", CARD_NUMBER.sub("[REDACTED]", value))
    if isinstance(value, Mapping):
        return sanitize_properties(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]
    return value


def sanitize_properties(properties: Mapping[str, Any]) -> dict[str, Any]:
    """Drop credential-like keys and mask card numbers and e-mail addresses, recursively."""
    return {
        key: _sanitize_value(value)
        for key, value in properties.items()
        if str(key).lower() not in SENSITIVE_KEYS
    }
