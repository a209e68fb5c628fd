"""Server side of remote sync.

The server stores whatever the client pushes, including its ``updatedTime``.
Ordering is the client's job; the server never compares write times.
"""

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from src.core.config import settings
from src.modules.preferences.domain.entities import AggregatedView
from src.modules.users.domain.entities import (
    DATA_KEY,
    PINNED_KEY,
    VIEWS_KEY,
    UserRecord,
)
from src.modules.users.domain.exceptions import (
    InvalidSyncPayloadError,
    SyncDisabledError,
)
from src.modules.users.domain.repository import UserRecordRepository


class SyncPushPayload(BaseModel):
    """Body accepted by ``POST /me/sync``."""

    model_config = ConfigDict(populate_by_name=True)

    data: dict[str, list[str]]
    updated_time: int = Field(..., alias="updatedTime", ge=0)
    aggregated_views: list[AggregatedView] | None = Field(None, alias="aggregatedViews")
    pinned_columns: list[str] | None = Field(None, alias="pinnedColumns")


class SyncService:
    """Read and replace a user's configuration record."""

    def __init__(self, repository: UserRecordRepository) -> None:
        self.repository = repository

    @staticmethod
    def _ensure_enabled() -> None:
        if not settings.SYNC_ENABLED:
            raise SyncDisabledError()

    async def pull(self, user_id: str) -> dict[str, Any]:
        self._ensure_enabled()
        record = await self.repository.get(user_id)
        if record is None:
            return {
                "data": None,
                "updatedTime": 0,
                "aggregatedViews": [],
                "pinnedColumns": [],
            }
        return {
            "data": record.data,
            "updatedTime": record.updated_ms,
            "aggregatedViews": [
                view.model_dump(mode="json", by_alias=True) for view in record.views
            ],
            "pinnedColumns": record.pinned_columns,
        }

    async def push(self, user_id: str, payload: Any) -> dict[str, Any]:
        self._ensure_enabled()
        try:
            body = SyncPushPayload.model_validate(payload)
        except PydanticValidationError as exc:
            logger.info(f"Rejected sync push from {user_id}: {exc.error_count()} errors")
            raise InvalidSyncPayloadError() from exc

        record = UserRecord(
            user_id=user_id,
            body={
                DATA_KEY: body.data,
                VIEWS_KEY: [
                    view.model_dump(mode="json", by_alias=True)
                    for view in body.aggregated_views or []
                ],
                PINNED_KEY: body.pinned_columns or [],
            },
            updated_ms=body.updated_time,
        )
        await self.repository.save(record)
        logger.info(f"Stored sync record for {user_id} at {body.updated_time}")
        return {"success": True, "updatedTime": body.updated_time}
