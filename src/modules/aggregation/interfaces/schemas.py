"""Aggregation API schemas."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AggregateResponse(BaseModel):
    """Merged feed envelope."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    source_ids: list[str] = Field(..., alias="sourceIds")
    updated_time: int = Field(..., alias="updatedTime")
    items: list[dict[str, Any]] = Field(default_factory=list)
    total: int = Field(..., description="截断前的条目总数")
