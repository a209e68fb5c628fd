"""Aggregated-view validation rules shared by the client façade and the REST API."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from src.core.config import settings
from src.modules.preferences.domain.entities import AggregatedView
from src.modules.preferences.domain.exceptions import (
    ViewNameConflictError,
    ViewValidationError,
)


def _check_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise PydanticCustomError("view_name_empty", "名称不能为空")
    if len(name) > settings.VIEW_NAME_MAX_LENGTH:
        raise PydanticCustomError(
            "view_name_too_long",
            "名称不能超过{max_length}个字符",
            {"max_length": settings.VIEW_NAME_MAX_LENGTH},
        )
    return name


def _check_sources(value: list[str]) -> list[str]:
    if not value:
        raise PydanticCustomError("view_sources_empty", "至少需要选择一个新闻源")
    if len(value) > settings.VIEW_MAX_SOURCES:
        raise PydanticCustomError(
            "view_sources_too_many",
            "最多支持{max_sources}个新闻源",
            {"max_sources": settings.VIEW_MAX_SOURCES},
        )
    return value


class CreateViewInput(BaseModel):
    """Fields required to create a view."""

    model_config = ConfigDict(extra="ignore")

    name: str
    sources: list[str]

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("sources")
    @classmethod
    def validate_sources(cls, value: list[str]) -> list[str]:
        return _check_sources(value)


class UpdateViewInput(BaseModel):
    """Partial update; at least one field must be supplied."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    sources: list[str] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        return None if value is None else _check_name(value)

    @field_validator("sources")
    @classmethod
    def validate_sources(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _check_sources(value)

    @model_validator(mode="after")
    def require_one_field(self) -> Self:
        if self.name is None and self.sources is None:
            raise PydanticCustomError("view_update_empty", "至少需要提供一个要更新的字段")
        return self


def parse_view_input[T: BaseModel](model: type[T], payload: Any) -> T:
    """Validate ``payload``; failures become one ``ViewValidationError``."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ViewValidationError(
            ", ".join(error["msg"] for error in exc.errors())
        ) from exc


def ensure_unique_name(
    views: list[AggregatedView], name: str, exclude_id: str | None = None
) -> None:
    """Raise if another view already uses ``name`` (case-sensitive)."""
    for view in views:
        if view.id != exclude_id and view.name == name:
            raise ViewNameConflictError(name)


def find_view_index(views: list[AggregatedView], view_id: str) -> int | None:
    for index, view in enumerate(views):
        if view.id == view_id:
            return index
    return None
