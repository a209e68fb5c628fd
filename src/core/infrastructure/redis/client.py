"""Redis 客户端封装。

聚合模块只用到字符串与 JSON 读写：信息源缓存按 key 批量读取（MGET），
响应缓存按 key 单条读写，都带过期时间。
"""

from __future__ import annotations

import json
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import redis.asyncio as aioredis
from loguru import logger

if TYPE_CHECKING:
    from redis.asyncio import Redis

from src.core.config import settings
from src.core.infrastructure.health import ComponentHealth, HealthStatus


class RedisClient:
    """Lazily connected ``redis.asyncio`` client with JSON helpers."""

    def __init__(self, url: str | None = None):
        self._url = url or settings.REDIS_URL
        self._client: Redis | None = None

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = aioredis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SEC,
                socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SEC,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health_check(self) -> ComponentHealth:
        try:
            await self.client.ping()
            info = await self.client.info("server")
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return ComponentHealth(
                status=HealthStatus.ERROR, connected=False, error=str(e)
            )
        return ComponentHealth(
            status=HealthStatus.OK,
            connected=True,
            version=info.get("redis_version"),
        )

    # ============ 字符串 ============

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def mget(self, keys: list[str]) -> list[str | None]:
        """批量读取，顺序与 keys 一致。"""
        if not keys:
            return []
        return await self.client.mget(keys)

    async def set(self, key: str, value: str, ex: int | timedelta | None = None) -> bool:
        return await self.client.set(key, value, ex=ex)

    # ============ JSON ============

    async def get_json(self, key: str) -> Any | None:
        return self._decode(key, await self.get(key))

    async def mget_json(self, keys: list[str]) -> list[Any | None]:
        """批量读取 JSON；无法解析的值按缺失处理。"""
        values = await self.mget(keys)
        return [self._decode(key, value) for key, value in zip(keys, values, strict=True)]

    async def set_json(
        self, key: str, value: Any, ex: int | timedelta | None = None
    ) -> bool:
        return await self.set(key, json.dumps(value, ensure_ascii=False), ex=ex)

    @staticmethod
    def _decode(key: str, value: str | None) -> Any | None:
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed JSON at redis key {key}")
            return None


redis_client = RedisClient()


def get_redis_client() -> RedisClient:
    return redis_client
