"""Source API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class SourceResponse(BaseModel):
    """One catalog entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    title: str | None = None
    column: str | None = None
    type: str | None = None
    interval: int = Field(..., description="刷新间隔（毫秒）")
    home: str | None = None
    color: str | None = None
    redirect: str | None = None


class CatalogResponse(BaseModel):
    """Source catalog listing."""

    model_config = ConfigDict(populate_by_name=True)

    columns: dict[str, str]
    fixed_columns: list[str] = Field(..., alias="fixedColumns")
    defaults: dict[str, list[str]] = Field(..., description="各固定栏目的默认信息源")
    sources: list[SourceResponse]
    loaded_from: str | None = Field(None, alias="loadedFrom")
