"""Expiring key/value storage for catalog data and list sessions."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Where services keep backend answers they may reuse for a while."""

    def get(self, key: str) -> object | None:
        """Return the value stored under ``key`` unless it has expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""

    def delete(self, key: str) -> None:
        """Forget ``key``."""


@dataclass
class _Slot:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; expired slots are dropped on read or purge."""

    _slots: dict[str, _Slot]

    def __init__(self) -> None:
        self._slots = {}

    def get(self, key: str) -> object | None:
        slot = self._slots.get(key)
        if slot is None:
            return None
        if _now() >= slot.expires_at:
            del self._slots[key]
            return None
        return slot.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        expires_at = _now() + timedelta(seconds=ttl_seconds)
        self._slots[key] = _Slot(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired slot and return how many were dropped."""
        now = _now()
        expired = [key for key, slot in self._slots.items() if now >= slot.expires_at]
        for key in expired:
            del self._slots[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._slots)


def _now() -> datetime:
    return datetime.now(tz=UTC)
