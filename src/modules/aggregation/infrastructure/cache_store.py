"""Redis-backed source cache and response cache."""

from collections.abc import Sequence
from typing import Any

from loguru import logger
from pydantic import ValidationError

from src.core.config import settings
from src.core.infrastructure.redis import RedisClient, RedisKeys
from src.modules.aggregation.domain.entities import CacheEntry
from src.modules.aggregation.domain.ports import ResponseCache, SourceCacheStore
from src.modules.sources.domain.entities import NewsItem


class RedisSourceCacheStore(SourceCacheStore):
    """Per-source cache entries stored as JSON ``{"items", "updated"}``."""

    def __init__(self, redis: RedisClient, retention_sec: int | None = None) -> None:
        self.redis = redis
        self.retention_sec = retention_sec or settings.SOURCE_CACHE_RETENTION_SEC

    async def get_entries(self, source_ids: Sequence[str]) -> dict[str, CacheEntry]:
        ids = list(source_ids)
        values = await self.redis.mget_json([RedisKeys.source_cache(i) for i in ids])

        entries: dict[str, CacheEntry] = {}
        for source_id, value in zip(ids, values, strict=True):
            entry = self._decode(source_id, value)
            if entry is not None:
                entries[source_id] = entry
        return entries

    async def set(self, source_id: str, items: list[NewsItem], updated: int) -> None:
        await self.redis.set_json(
            RedisKeys.source_cache(source_id),
            {"items": [item.to_payload() for item in items], "updated": updated},
            ex=self.retention_sec,
        )

    @staticmethod
    def _decode(source_id: str, value: Any) -> CacheEntry | None:
        if not isinstance(value, dict):
            return None
        updated = value.get("updated")
        raw_items = value.get("items")
        if not isinstance(updated, int) or not isinstance(raw_items, list):
            logger.warning(f"Ignoring malformed cache entry for {source_id}")
            return None
        try:
            items = [NewsItem.model_validate(raw) for raw in raw_items]
        except ValidationError as exc:
            logger.warning(f"Ignoring cache entry for {source_id}: {exc}")
            return None
        return CacheEntry(source_id=source_id, items=items, updated=updated)


class RedisResponseCache(ResponseCache):
    """Whole-response cache keyed by ``RedisKeys.response_cache``."""

    def __init__(self, redis: RedisClient) -> None:
        self.redis = redis

    async def get(self, key: str) -> dict[str, Any] | None:
        value = await self.redis.get_json(RedisKeys.response_cache(key))
        return value if isinstance(value, dict) else None

    async def set(self, key: str, payload: dict[str, Any], ttl_sec: int) -> None:
        await self.redis.set_json(RedisKeys.response_cache(key), payload, ex=ttl_sec)
