"""Preferences domain entities.

``ConfigurationRecord`` is the single local-first document: selected sources per
category, pinned categories and aggregated-view definitions, versioned by a
scalar write time (epoch milliseconds).
"""

import json
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SyncAction(StrEnum):
    """记录的来源标记。"""

    INIT = "init"  # 启动时从本地存储恢复或默认生成
    MANUAL = "manual"  # 用户本地修改，需要推送
    SYNC = "sync"  # 从服务端拉取


class AggregatedView(BaseModel):
    """User-defined feed combining several sources."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    sources: list[str]
    created_at: int = Field(..., alias="createdAt")
    updated_at: int = Field(..., alias="updatedAt")


class ConfigurationRecord(BaseModel):
    """The versioned configuration document; replaced wholesale, never merged."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    updated_time: int = Field(0, alias="updatedTime")
    action: SyncAction = SyncAction.INIT
    data: dict[str, list[str]] = Field(default_factory=dict)
    pinned_columns: list[str] = Field(default_factory=list, alias="pinnedColumns")
    aggregated_views: list[AggregatedView] = Field(
        default_factory=list, alias="aggregatedViews"
    )

    def to_storage(self) -> str:
        return self.model_dump_json(by_alias=True)

    def sync_payload(self) -> dict[str, Any]:
        """Body of a sync push."""
        return {
            "data": self.data,
            "updatedTime": self.updated_time,
            "aggregatedViews": [
                view.model_dump(mode="json", by_alias=True)
                for view in self.aggregated_views
            ],
            "pinnedColumns": list(self.pinned_columns),
        }

    def sync_snapshot(self) -> str:
        """Canonical serialization of the synced content (time and action excluded)."""
        payload = self.sync_payload()
        payload.pop("updatedTime")
        return json.dumps(
            payload, sort_keys=True, ensure_ascii=False, separators=(",", ":")
        )


class RemoteRecord(BaseModel):
    """Server copy as returned by ``GET /me/sync``."""

    model_config = ConfigDict(populate_by_name=True)

    data: dict[str, list[str]] | None = None
    updated_time: int = Field(0, alias="updatedTime")
    aggregated_views: list[AggregatedView] = Field(
        default_factory=list, alias="aggregatedViews"
    )
    pinned_columns: list[str] = Field(default_factory=list, alias="pinnedColumns")

    def to_candidate(self) -> ConfigurationRecord | None:
        if self.data is None:
            return None
        return ConfigurationRecord(
            updated_time=self.updated_time,
            action=SyncAction.SYNC,
            data=self.data,
            pinned_columns=self.pinned_columns,
            aggregated_views=self.aggregated_views,
        )
