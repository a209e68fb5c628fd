"""Aggregation module dependencies."""

from fastapi import Depends

from src.core.infrastructure.background import BackgroundTaskQueue
from src.core.infrastructure.redis import RedisClient, get_redis_client
from src.modules.aggregation.application.service import (
    AggregateFeedService,
    AggregationService,
)
from src.modules.aggregation.infrastructure.cache_store import (
    RedisResponseCache,
    RedisSourceCacheStore,
)
from src.modules.sources.application.services import SourceCatalogService
from src.modules.sources.infrastructure.dependencies import get_source_catalog_service

# 缓存回写队列：与请求生命周期解耦
cache_write_queue = BackgroundTaskQueue("source-cache-write")


def get_cache_write_queue() -> BackgroundTaskQueue:
    return cache_write_queue


def get_aggregate_feed_service(
    redis: RedisClient = Depends(get_redis_client),
    catalog_service: SourceCatalogService = Depends(get_source_catalog_service),
    background: BackgroundTaskQueue = Depends(get_cache_write_queue),
) -> AggregateFeedService:
    cache_store = RedisSourceCacheStore(redis)

    def build_aggregation() -> AggregationService:
        return AggregationService(
            catalog=catalog_service.catalog,
            getters=catalog_service.getters,
            cache_store=cache_store,
            background=background,
        )

    return AggregateFeedService(build_aggregation, RedisResponseCache(redis))
