"""Aggregation domain exceptions."""

from fastapi import status

from src.core.domain.exceptions import DomainException


class NoValidSourcesError(DomainException):
    """请求的信息源 ID 中没有任何一个同时具备目录定义和 getter。"""

    http_status_code = status.HTTP_400_BAD_REQUEST
    error_code = "NO_VALID_SOURCES"

    def __init__(self, message: str = "所有提供的sourceIds都无效"):
        super().__init__(message)


class CacheUnavailableError(DomainException):
    """信息源缓存存储不可达；没有可降级的路径。"""

    http_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "CACHE_UNAVAILABLE"

    def __init__(self, message: str = "缓存表不可用"):
        super().__init__(message)
