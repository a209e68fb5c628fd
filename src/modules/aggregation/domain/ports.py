"""Aggregation ports."""

from collections.abc import Sequence
from typing import Any, Protocol

from src.modules.aggregation.domain.entities import CacheEntry
from src.modules.sources.domain.entities import NewsItem


class SourceCacheStore(Protocol):
    """Durable per-source cache of the last successful fetch."""

    async def get_entries(self, source_ids: Sequence[str]) -> dict[str, CacheEntry]:
        """Batched read; ids without an entry are absent from the result."""
        ...

    async def set(self, source_id: str, items: list[NewsItem], updated: int) -> None:
        ...


class ResponseCache(Protocol):
    """Short-lived cache of whole aggregate responses."""

    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, payload: dict[str, Any], ttl_sec: int) -> None: ...
