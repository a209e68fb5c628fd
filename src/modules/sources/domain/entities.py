"""Source domain entities."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceKind(StrEnum):
    """信息源类型（决定其默认归属的热门/实时栏目）。"""

    HOTTEST = "hottest"
    REALTIME = "realtime"


class NewsItem(BaseModel):
    """一条由 getter 产出的新闻条目，产出后不可变。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | int = Field(..., description="条目 ID（源内唯一）")
    title: str = Field(..., description="标题")
    url: str = Field(..., description="原文URL")
    mobile_url: str | None = Field(
        default=None, alias="mobileUrl", description="移动端URL"
    )
    pub_date: int | float | str | None = Field(
        default=None, alias="pubDate", description="发布时间（时间戳或日期字符串）"
    )
    extra: dict[str, Any] | None = Field(default=None, description="扩展信息")

    def to_payload(self) -> dict[str, Any]:
        """序列化为线上格式（camelCase，省略空字段）。"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class SourceDefinition:
    """Catalog metadata for one (possibly composed ``parent-sub``) source."""

    id: str
    name: str
    title: str | None = None
    column: str | None = None
    kind: SourceKind | None = None
    interval_ms: int = 600_000
    home: str | None = None
    color: str | None = None
    disable: bool = False
    redirect: str | None = None

    @property
    def display_name(self) -> str:
        if self.title:
            return f"{self.name}-{self.title}"
        return self.name
