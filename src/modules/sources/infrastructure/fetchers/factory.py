"""Getter 工厂。

为目录中每个启用的规范化信息源 ID 创建对应的 getter。
"""

import httpx

from src.modules.sources.domain.catalog import SourceCatalog
from src.modules.sources.domain.getter import GetterRegistry
from src.modules.sources.infrastructure.fetchers.newsnow import NewsNowGetter


class GetterFactory:
    """Getter 工厂类。"""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_path: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.api_path = api_path
        self.timeout_sec = timeout_sec
        self.transport = transport

    def create(self, source_id: str) -> NewsNowGetter:
        """为单个信息源创建 getter。"""
        return NewsNowGetter(
            source_id,
            base_url=self.base_url,
            api_path=self.api_path,
            timeout_sec=self.timeout_sec,
            transport=self.transport,
        )

    def build_registry(self, catalog: SourceCatalog) -> GetterRegistry:
        """根据目录构建 getter 注册表（跳过禁用与重定向的 ID）。"""
        return GetterRegistry(
            {source_id: self.create(source_id) for source_id in catalog.canonical_ids()}
        )
