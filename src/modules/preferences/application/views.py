"""View mutation façade.

Create, update and delete aggregated views optimistically through the local
store. Persistence to the server rides on the sync engine's debounced push;
there is no per-operation network call.
"""

import uuid
from collections.abc import Callable

from src.core.domain.clock import Clock, now_ms
from src.core.infrastructure.logging import BusinessEvents
from src.modules.preferences.application.store import LocalConfigurationStore
from src.modules.preferences.domain.entities import AggregatedView
from src.modules.preferences.domain.exceptions import ViewNotFoundError
from src.modules.preferences.domain.views import (
    CreateViewInput,
    UpdateViewInput,
    ensure_unique_name,
    find_view_index,
    parse_view_input,
)


class ViewMutationFacade:
    """Client-side CRUD over ``aggregated_views`` plus the active selection."""

    def __init__(
        self,
        store: LocalConfigurationStore,
        clock: Clock = now_ms,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.store = store
        self._clock = clock
        self._id_factory = id_factory
        self._active_view_id: str | None = None

    def list_views(self) -> list[AggregatedView]:
        return list(self.store.read().aggregated_views)

    def get(self, view_id: str) -> AggregatedView:
        views = self.list_views()
        index = find_view_index(views, view_id)
        if index is None:
            raise ViewNotFoundError(view_id)
        return views[index]

    def create(self, name: str, sources: list[str]) -> AggregatedView:
        validated = parse_view_input(
            CreateViewInput, {"name": name, "sources": sources}
        )
        views = self.list_views()
        ensure_unique_name(views, validated.name)

        now = self._clock()
        view = AggregatedView(
            id=self._id_factory(),
            name=validated.name,
            sources=validated.sources,
            created_at=now,
            updated_at=now,
        )
        self.store.replace_views([*views, view])
        BusinessEvents.view_mutated(action="create", view_id=view.id, origin="local")
        return view

    def update(
        self,
        view_id: str,
        *,
        name: str | None = None,
        sources: list[str] | None = None,
    ) -> AggregatedView:
        payload: dict[str, object] = {}
        if name is not None:
            payload["name"] = name
        if sources is not None:
            payload["sources"] = sources
        validated = parse_view_input(UpdateViewInput, payload)

        views = self.list_views()
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
        updated = current.model_copy(update=changes)

        views[index] = updated
        self.store.replace_views(views)
        BusinessEvents.view_mutated(action="update", view_id=view_id, origin="local")
        return updated

    def delete(self, view_id: str) -> None:
        views = self.list_views()
        remaining = [view for view in views if view.id != view_id]
        if len(remaining) == len(views):
            raise ViewNotFoundError(view_id)

        self.store.replace_views(remaining)
        if self._active_view_id == view_id:
            self._active_view_id = None
        BusinessEvents.view_mutated(action="delete", view_id=view_id, origin="local")

    # ============ 当前选中的视图 ============

    def select(self, view_id: str | None) -> AggregatedView | None:
        if view_id is None:
            self._active_view_id = None
            return None
        view = self.get(view_id)
        self._active_view_id = view.id
        return view

    @property
    def active_view_id(self) -> str | None:
        return self._active_view_id

    @property
    def active_view(self) -> AggregatedView | None:
        if self._active_view_id is None:
            return None
        index = find_view_index(self.list_views(), self._active_view_id)
        if index is None:
            # 视图可能已被同步拉取的记录移除
            self._active_view_id = None
            return None
        return self.list_views()[index]

    def sources_for_aggregation(self) -> list[str]:
        view = self.active_view
        return list(view.sources) if view else []
