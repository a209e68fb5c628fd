"""Redis Key 命名规范。

Redis 用于：
- Source Cache: 每个信息源最近一次成功抓取的条目
- Response Cache: 聚合接口的短期响应缓存
"""


class RedisKeys:
    """Redis Key 命名空间管理。"""

    # 信息源缓存
    # cache:source:{source_id}
    SOURCE_CACHE_PREFIX = "cache:source"

    # 聚合响应缓存
    # cache:response:aggregate:{sorted_source_ids}
    RESPONSE_CACHE_PREFIX = "cache:response"

    @classmethod
    def source_cache(cls, source_id: str) -> str:
        """生成信息源缓存 key。

        Args:
            source_id: 信息源 ID（规范化后的 ID）

        Returns:
            格式化的 Redis key
        """
        return f"{cls.SOURCE_CACHE_PREFIX}:{source_id}"

    @classmethod
    def response_cache(cls, cache_key: str) -> str:
        """生成响应缓存 key。"""
        return f"{cls.RESPONSE_CACHE_PREFIX}:{cache_key}"
