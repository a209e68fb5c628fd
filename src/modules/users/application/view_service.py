"""Aggregated-view REST operations.

Validation rules are shared with the client façade. Each mutation rewrites only
the views key of the user record and bumps the record time to the server clock.
"""

import uuid
from collections.abc import Callable
from typing import Any

from src.core.domain.clock import Clock, now_ms
from src.core.infrastructure.logging import BusinessEvents
from src.modules.preferences.domain.entities import AggregatedView
from src.modules.preferences.domain.exceptions import ViewNotFoundError
from src.modules.preferences.domain.views import (
    CreateViewInput,
    UpdateViewInput,
    ensure_unique_name,
    find_view_index,
    parse_view_input,
)
from src.modules.users.domain.entities import UserRecord
from src.modules.users.domain.repository import UserRecordRepository


class AggregatedViewService:
    """CRUD over one user's aggregated views."""

    def __init__(
        self,
        repository: UserRecordRepository,
        clock: Clock = now_ms,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.repository = repository
        self._clock = clock
        self._id_factory = id_factory

    async def _load(self, user_id: str) -> UserRecord:
        record = await self.repository.get(user_id)
        return record or UserRecord(user_id=user_id)

    async def _store(self, record: UserRecord, views: list[AggregatedView]) -> None:
        await self.repository.save(record.with_views(views, self._clock()))

    async def list_views(self, user_id: str) -> list[AggregatedView]:
        return (await self._load(user_id)).views

    async def get_view(self, user_id: str, view_id: str) -> AggregatedView:
        views = await self.list_views(user_id)
        index = find_view_index(views, view_id)
        if index is None:
            raise ViewNotFoundError(view_id)
        return views[index]

    async def create_view(self, user_id: str, payload: Any) -> AggregatedView:
        validated = parse_view_input(CreateViewInput, payload)
        record = await self._load(user_id)
        views = record.views
        ensure_unique_name(views, validated.name)

        now = self._clock()
        view = AggregatedView(
            id=self._id_factory(),
            name=validated.name,
            sources=validated.sources,
            created_at=now,
            updated_at=now,
        )
        await self._store(record, [*views, view])
        BusinessEvents.view_mutated(action="create", view_id=view.id, origin="server")
        return view

    async def update_view(
        self, user_id: str, view_id: str, payload: Any
    ) -> AggregatedView:
        validated = parse_view_input(UpdateViewInput, payload)
        record = await self._load(user_id)
        views = record.views
        index = find_view_index(views, view_id)
        if index is None:
            raise ViewNotFoundError(view_id)

        current = views[index]
        if validated.name is not None and validated.name != current.name:
            ensure_unique_name(views, validated.name, exclude_id=view_id)

        changes: dict[str, object] = {"updated_at": self._clock()}
        if validated.name is not None:
            changes["name"] = validated.name
        if validated.sources is not None:
            changes["sources"] = validated.sources
        views[index] = current.model_copy(update=changes)

        await self._store(record, views)
        BusinessEvents.view_mutated(action="update", view_id=view_id, origin="server")
        return views[index]

    async def delete_view(self, user_id: str, view_id: str) -> None:
        record = await self._load(user_id)
        views = record.views
        remaining = [view for view in views if view.id != view_id]
        if len(remaining) == len(views):
            raise ViewNotFoundError(view_id)

        await self._store(record, remaining)
        BusinessEvents.view_mutated(action="delete", view_id=view_id, origin="server")
