"""Local configuration store.

Holds exactly one ``ConfigurationRecord``. Every mutation path (category
selection, pin toggles, view edits, sync pulls) goes through ``write()``, which
accepts a candidate only when its ``updated_time`` is strictly greater than the
held one. Concurrent writers are therefore safe without locks: the larger write
time wins and the other write is dropped whole.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from loguru import logger
from pydantic import ValidationError

from src.core.domain.clock import Clock, now_ms
from src.modules.preferences.domain.entities import (
    AggregatedView,
    ConfigurationRecord,
    SyncAction,
)
from src.modules.preferences.domain.exceptions import UnknownCategoryError
from src.modules.preferences.domain.ports import DurableStorage
from src.modules.preferences.domain.preprocess import (
    default_category_sources,
    preprocess,
)
from src.modules.sources.domain.catalog import FAVORITES_CATEGORY, SourceCatalog

METADATA_STORAGE_KEY = "metadata"

Listener = Callable[[ConfigurationRecord], None]


class LocalConfigurationStore:
    """Single-record store with monotonic write-time acceptance."""

    def __init__(
        self,
        initial: ConfigurationRecord,
        catalog: SourceCatalog,
        storage: DurableStorage | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._record = initial
        self.catalog = catalog
        self._storage = storage
        self._clock = clock
        self._listeners: list[Listener] = []

    @classmethod
    def load(
        cls,
        storage: DurableStorage,
        catalog: SourceCatalog,
        clock: Clock = now_ms,
    ) -> LocalConfigurationStore:
        """Recover the record from storage (or defaults) and preprocess it."""
        recovered = cls._recover(storage)
        if recovered is None:
            initial = ConfigurationRecord(
                updated_time=0,
                action=SyncAction.INIT,
                data=default_category_sources(catalog),
            )
        else:
            initial = preprocess(
                recovered.model_copy(update={"action": SyncAction.INIT}), catalog
            )
        return cls(initial, catalog, storage, clock)

    @staticmethod
    def _recover(storage: DurableStorage) -> ConfigurationRecord | None:
        try:
            raw = storage.get(METADATA_STORAGE_KEY)
        except OSError as exc:
            logger.warning(f"Reading stored configuration failed: {exc}")
            return None
        if not raw:
            return None
        try:
            return ConfigurationRecord.model_validate_json(raw)
        except ValidationError as exc:
            logger.debug(f"Discarding invalid stored configuration: {exc}")
            return None

    def read(self) -> ConfigurationRecord:
        return self._record

    def write(self, candidate: ConfigurationRecord) -> bool:
        """Apply ``candidate`` iff it is strictly newer; persist and notify."""
        if candidate.updated_time <= self._record.updated_time:
            return False

        self._record = candidate
        self._persist(candidate)
        for listener in list(self._listeners):
            listener(candidate)
        return True

    def _persist(self, record: ConfigurationRecord) -> None:
        if self._storage is None:
            return
        try:
            self._storage.set(METADATA_STORAGE_KEY, record.to_storage())
        except OSError as exc:
            logger.error(f"保存配置到本地存储失败: {exc}")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for accepted writes; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ============ 本地修改 ============

    def next_write_time(self) -> int:
        return max(self._clock(), self._record.updated_time + 1)

    def _commit(self, **changes: object) -> ConfigurationRecord:
        candidate = self._record.model_copy(
            update={
                **changes,
                "updated_time": self.next_write_time(),
                "action": SyncAction.MANUAL,
            }
        )
        self.write(candidate)
        return candidate

    def set_category_sources(
        self, category: str, source_ids: Sequence[str]
    ) -> ConfigurationRecord:
        if category not in self.catalog.fixed_categories():
            raise UnknownCategoryError(category)
        data = dict(self._record.data)
        data[category] = list(dict.fromkeys(source_ids))
        return self._commit(data=data)

    def set_favorites(self, source_ids: Sequence[str]) -> ConfigurationRecord:
        return self.set_category_sources(FAVORITES_CATEGORY, source_ids)

    def toggle_favorite(self, source_id: str) -> ConfigurationRecord:
        favorites = list(self._record.data.get(FAVORITES_CATEGORY, []))
        if source_id in favorites:
            favorites.remove(source_id)
        else:
            favorites.append(source_id)
        return self.set_favorites(favorites)

    def toggle_pin(self, category: str) -> ConfigurationRecord:
        pinned = list(self._record.pinned_columns)
        if category in pinned:
            pinned.remove(category)
        else:
            pinned.append(category)
        return self._commit(pinned_columns=pinned)

    def replace_views(self, views: Sequence[AggregatedView]) -> ConfigurationRecord:
        return self._commit(aggregated_views=list(views))

    # ============ 派生读取 ============

    def effective_sources(self, category: str) -> list[str]:
        """Ordered source list for ``category``: favorited first, then the rest."""
        data = self._record.data
        stored = data.get(category, [])
        if category == FAVORITES_CATEGORY:
            return list(stored)

        favorites = data.get(FAVORITES_CATEGORY, [])
        favorite_set = set(favorites)
        stored_set = set(stored)

        favorited = [s for s in stored if s in favorite_set]
        newly_favorited = [
            s
            for s in favorites
            if s not in stored_set and self.catalog.belongs_to(s, category)
        ]
        rest = [s for s in stored if s not in favorite_set]
        return favorited + newly_favorited + rest
