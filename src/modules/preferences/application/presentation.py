"""分组展开/折叠状态。

纯展示状态，单独持久化，不参与同步。
"""

import json
from collections.abc import Iterable

from loguru import logger

from src.modules.preferences.domain.ports import DurableStorage

GROUP_EXPANSION_STORAGE_KEY = "source-group-expansion"


class GroupExpansionStore:
    """Category -> expanded flag, persisted after every change."""

    def __init__(
        self,
        storage: DurableStorage,
        storage_key: str = GROUP_EXPANSION_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._expanded = self._recover()

    def _recover(self) -> dict[str, bool]:
        try:
            raw = self._storage.get(self._storage_key)
        except OSError as exc:
            logger.warning(f"读取分组展开状态时出错: {exc}")
            return {}
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            logger.warning(f"读取分组展开状态时出错: {exc}")
            return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(k): v for k, v in parsed.items() if isinstance(v, bool)}

    def _persist(self) -> None:
        try:
            self._storage.set(self._storage_key, json.dumps(self._expanded))
        except OSError as exc:
            logger.error(f"无法保存分组展开状态: {exc}")

    @property
    def expanded_groups(self) -> dict[str, bool]:
        return dict(self._expanded)

    def is_expanded(self, group: str) -> bool:
        return self._expanded.get(group, False)

    def toggle(self, group: str) -> bool:
        self._expanded[group] = not self._expanded.get(group, False)
        self._persist()
        return self._expanded[group]

    def set_expanded(self, group: str, expanded: bool) -> None:
        self._expanded[group] = expanded
        self._persist()

    def set_all(self, groups: Iterable[str], expanded: bool) -> None:
        """Replace the state with ``expanded`` for every group in ``groups``."""
        self._expanded = dict.fromkeys(groups, expanded)
        self._persist()
