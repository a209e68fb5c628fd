"""Redis 客户端封装。"""

from src.core.infrastructure.redis.client import (
    RedisClient,
    get_redis_client,
    redis_client,
)
from src.core.infrastructure.redis.keys import RedisKeys

__all__ = ["RedisClient", "RedisKeys", "get_redis_client", "redis_client"]
