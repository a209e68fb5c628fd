"""Aggregation orchestrator.

Serves a merged, recency-ranked feed from many independently refreshed sources.
Per source it decides between the cache and an upstream fetch; a failing source
degrades to stale cache or an empty list and never aborts its siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from loguru import logger

from src.core.config import settings
from src.core.domain.clock import Clock, now_ms
from src.core.infrastructure.background import BackgroundTaskQueue
from src.core.infrastructure.logging import BusinessEvents
from src.modules.aggregation.domain.entities import (
    AggregatedItem,
    AggregatedResult,
    CacheEntry,
    SourceResult,
    SourceStatus,
)
from src.modules.aggregation.domain.exceptions import (
    CacheUnavailableError,
    NoValidSourcesError,
)
from src.modules.aggregation.domain.ports import ResponseCache, SourceCacheStore
from src.modules.aggregation.domain.timestamps import resolve_item_timestamp
from src.modules.sources.domain.catalog import SourceCatalog
from src.modules.sources.domain.entities import NewsItem
from src.modules.sources.domain.getter import SourceGetter


class AggregationService:
    """Aggregate several sources into one ranked feed."""

    def __init__(
        self,
        catalog: SourceCatalog,
        getters: Mapping[str, SourceGetter],
        cache_store: SourceCacheStore,
        background: BackgroundTaskQueue,
        *,
        stale_ttl_ms: int | None = None,
        max_items_per_source: int | None = None,
        max_items: int | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self.catalog = catalog
        self.getters = getters
        self.cache_store = cache_store
        self.background = background
        self.stale_ttl_ms = (
            stale_ttl_ms
            if stale_ttl_ms is not None
            else settings.AGGREGATE_STALE_TTL_SEC * 1000
        )
        self.max_items_per_source = (
            max_items_per_source or settings.AGGREGATE_MAX_ITEMS_PER_SOURCE
        )
        self.max_items = max_items or settings.AGGREGATE_MAX_ITEMS
        self.clock = clock

    def resolve_source_ids(self, source_ids: Sequence[str]) -> list[str]:
        """Canonicalize, drop ids without definition or getter, dedupe in order."""
        valid: list[str] = []
        seen: set[str] = set()
        for raw_id in source_ids:
            canonical = self.catalog.resolve(raw_id)
            if canonical is None or canonical not in self.getters:
                continue
            if canonical in seen:
                continue
            seen.add(canonical)
            valid.append(canonical)
        return valid

    async def aggregate(
        self, source_ids: Sequence[str], force_fresh: bool = False
    ) -> AggregatedResult:
        if not source_ids:
            raise NoValidSourcesError("必须提供至少一个有效的sourceIds参数")

        valid_ids = self.resolve_source_ids(source_ids)
        if not valid_ids:
            raise NoValidSourcesError()

        try:
            entries = await self.cache_store.get_entries(valid_ids)
        except Exception as exc:
            logger.error(f"Source cache read failed for {valid_ids}: {exc}")
            raise CacheUnavailableError() from exc

        now = self.clock()
        outcomes = await asyncio.gather(
            *(
                self._load_source(source_id, entries.get(source_id), force_fresh, now)
                for source_id in valid_ids
            ),
            return_exceptions=True,
        )

        results: list[SourceResult] = []
        for source_id, outcome in zip(valid_ids, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.error(f"Unexpected failure loading {source_id}: {outcome}")
                outcome = self._degrade(source_id, entries.get(source_id), now)
            results.append(outcome)

        merged = self._merge(results)
        result = AggregatedResult(
            source_ids=valid_ids,
            updated_time=now,
            items=merged[: self.max_items],
            total=len(merged),
            source_results=results,
        )
        BusinessEvents.aggregate_served(
            source_ids=valid_ids, total=result.total, forced=force_fresh
        )
        return result

    async def _load_source(
        self,
        source_id: str,
        entry: CacheEntry | None,
        force_fresh: bool,
        now: int,
    ) -> SourceResult:
        if not force_fresh and entry is not None:
            age = entry.age(now)
            if age < self.catalog.interval_of(source_id):
                return SourceResult(source_id, entry.items, now, SourceStatus.SUCCESS)
            if age < self.stale_ttl_ms:
                return SourceResult(
                    source_id, entry.items, entry.updated, SourceStatus.CACHE
                )

        return await self._fetch(source_id, entry, force_fresh, now)

    async def _fetch(
        self,
        source_id: str,
        entry: CacheEntry | None,
        force_fresh: bool,
        now: int,
    ) -> SourceResult:
        try:
            fetched = await self.getters[source_id](force_fresh)
        except Exception as exc:
            logger.warning(
                f"Fetching {source_id}{' (latest)' if force_fresh else ''} failed: {exc}"
            )
            degraded = self._degrade(source_id, entry, now)
            BusinessEvents.source_fetch_failed(
                source_id=source_id,
                error=str(exc),
                degraded_to="cache" if entry is not None else "empty",
            )
            return degraded

        items = list(fetched[: self.max_items_per_source])
        if items:
            self.background.submit(
                self.cache_store.set(source_id, items, now),
                label=f"cache-write:{source_id}",
            )
        return SourceResult(source_id, items, now, SourceStatus.SUCCESS)

    @staticmethod
    def _degrade(source_id: str, entry: CacheEntry | None, now: int) -> SourceResult:
        if entry is not None:
            return SourceResult(source_id, entry.items, entry.updated, SourceStatus.CACHE)
        return SourceResult(source_id, [], now, SourceStatus.SUCCESS)

    def _merge(self, results: list[SourceResult]) -> list[AggregatedItem]:
        annotated: list[AggregatedItem] = []
        for result in results:
            source_name = self.catalog.name_of(result.source_id)
            for item in result.items:
                annotated.append(
                    AggregatedItem(
                        **item.model_dump(),
                        original_source_id=result.source_id,
                        original_source_name=source_name,
                        timestamp=resolve_item_timestamp(item, result.updated_time),
                    )
                )
        # sorted() 是稳定排序，reverse 不改变同时间戳条目的相对顺序
        return sorted(annotated, key=lambda item: item.timestamp, reverse=True)


def build_response_cache_key(
    source_ids: Sequence[str], force_fresh: bool, now: int
) -> str:
    """``aggregate:<sorted ids>``; forced requests get a unique suffix."""
    key = f"aggregate:{','.join(sorted(set(source_ids)))}"
    if force_fresh:
        key = f"{key}-latest-{now}"
    return key


class AggregateFeedService:
    """Aggregation behind a short-lived response cache.

    Forced refreshes never read or write the response cache. Response cache
    failures are logged and ignored.
    """

    def __init__(
        self,
        aggregation_factory: Callable[[], AggregationService],
        response_cache: ResponseCache | None,
        *,
        ttl_sec: int | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._aggregation_factory = aggregation_factory
        self.response_cache = response_cache
        self.ttl_sec = ttl_sec or settings.AGGREGATE_RESPONSE_CACHE_TTL_SEC
        self.clock = clock

    async def get_feed(
        self, source_ids: Sequence[str], force_fresh: bool = False
    ) -> dict[str, Any]:
        key = build_response_cache_key(source_ids, force_fresh, self.clock())
        cache = None if force_fresh else self.response_cache

        if cache is not None:
            cached = await self._read_cache(cache, key)
            if cached is not None:
                return cached

        result = await self._aggregation_factory().aggregate(source_ids, force_fresh)
        payload = result.to_payload()

        if cache is not None:
            await self._write_cache(cache, key, payload)
        return payload

    async def _read_cache(self, cache: ResponseCache, key: str) -> dict[str, Any] | None:
        try:
            return await cache.get(key)
        except Exception as exc:
            logger.warning(f"Response cache read failed for {key}: {exc}")
            return None

    async def _write_cache(
        self, cache: ResponseCache, key: str, payload: dict[str, Any]
    ) -> None:
        try:
            await cache.set(key, payload, self.ttl_sec)
        except Exception as exc:
            logger.warning(f"Response cache write failed for {key}: {exc}")
