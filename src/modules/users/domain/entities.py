"""Per-user record kept by the server.

The record body is one JSON document with the keys ``data`` (category ->
source ids), ``aggregated_views_config`` and ``pinnedColumns``. The sync
endpoint replaces it wholesale; the view endpoints rewrite only their key.
"""

from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.modules.preferences.domain.entities import AggregatedView

DATA_KEY = "data"
VIEWS_KEY = "aggregated_views_config"
PINNED_KEY = "pinnedColumns"

_views_adapter = TypeAdapter(list[AggregatedView])


class UserRecord(BaseModel):
    """Stored configuration document of one user."""

    user_id: str
    body: dict[str, Any] = Field(default_factory=dict)
    updated_ms: int = 0

    @property
    def data(self) -> dict[str, list[str]] | None:
        value = self.body.get(DATA_KEY)
        return value if isinstance(value, dict) else None

    @property
    def pinned_columns(self) -> list[str]:
        value = self.body.get(PINNED_KEY)
        return [v for v in value if isinstance(v, str)] if isinstance(value, list) else []

    @property
    def views(self) -> list[AggregatedView]:
        raw = self.body.get(VIEWS_KEY)
        if not raw:
            return []
        try:
            return _views_adapter.validate_python(raw)
        except PydanticValidationError as exc:
            logger.warning(f"Ignoring malformed views of user {self.user_id}: {exc}")
            return []

    def with_views(self, views: list[AggregatedView], updated_ms: int) -> "UserRecord":
        body = dict(self.body)
        body[VIEWS_KEY] = [view.model_dump(mode="json", by_alias=True) for view in views]
        return self.model_copy(update={"body": body, "updated_ms": updated_ms})
