"""Aggregation domain entities."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import ConfigDict, Field

from src.modules.sources.domain.entities import NewsItem


class SourceStatus(StrEnum):
    """单个信息源在一次聚合中的结果状态。"""

    SUCCESS = "success"  # 刚抓取，或缓存仍在刷新间隔内
    CACHE = "cache"  # 使用了超过刷新间隔的缓存


@dataclass(frozen=True)
class CacheEntry:
    """One source's last successful fetch, overwritten wholesale."""

    source_id: str
    items: list[NewsItem]
    updated: int

    def age(self, now: int) -> int:
        return now - self.updated


@dataclass(frozen=True)
class SourceResult:
    """Outcome for one source inside one aggregate call."""

    source_id: str
    items: list[NewsItem]
    updated_time: int
    status: SourceStatus


class AggregatedItem(NewsItem):
    """NewsItem annotated with its origin and resolved ranking timestamp."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    original_source_id: str = Field(..., alias="originalSourceId")
    original_source_name: str = Field(..., alias="originalSourceName")
    timestamp: int = Field(..., description="排序时间戳（毫秒）")


@dataclass
class AggregatedResult:
    """Merged, recency-ranked feed."""

    source_ids: list[str]
    updated_time: int
    items: list[AggregatedItem]
    total: int
    source_results: list[SourceResult] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "success",
            "sourceIds": list(self.source_ids),
            "updatedTime": self.updated_time,
            "items": [item.to_payload() for item in self.items],
            "total": self.total,
        }
