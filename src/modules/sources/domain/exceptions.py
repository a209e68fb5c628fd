"""Source domain exceptions."""

from fastapi import status

from src.core.domain.exceptions import DomainException


class UpstreamFetchError(DomainException):
    """单个信息源抓取失败。

    聚合流程内部会就地降级（旧缓存或空列表），不会作为整次请求的失败返回。
    """

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "UPSTREAM_FETCH_FAILED"

    def __init__(self, source_id: str, reason: str):
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"Fetching source '{source_id}' failed: {reason}")


class CatalogUnavailableError(DomainException):
    """信息源目录无法加载（远程与本地快照均失败）。"""

    http_status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "CATALOG_UNAVAILABLE"
