"""User record API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from src.modules.preferences.domain.entities import AggregatedView


class AggregatedViewResponse(BaseModel):
    """One aggregated view."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    sources: list[str]
    created_at: int = Field(..., alias="createdAt")
    updated_at: int = Field(..., alias="updatedAt")

    @classmethod
    def from_view(cls, view: AggregatedView) -> "AggregatedViewResponse":
        return cls.model_validate(view.model_dump())


class SyncRecordResponse(BaseModel):
    """Server copy of the configuration record."""

    model_config = ConfigDict(populate_by_name=True)

    data: dict[str, list[str]] | None = None
    updated_time: int = Field(0, alias="updatedTime")
    aggregated_views: list[AggregatedViewResponse] = Field(
        default_factory=list, alias="aggregatedViews"
    )
    pinned_columns: list[str] = Field(default_factory=list, alias="pinnedColumns")


class SyncPushResponse(BaseModel):
    """Acknowledgement of a stored push."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    updated_time: int = Field(..., alias="updatedTime")
