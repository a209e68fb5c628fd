"""Source catalog domain model and ports.

The catalog is the canonical registry of upstream sources: which ids exist,
which are disabled, which redirect to another id, and which sources each
category shows by default.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal, Protocol

from src.modules.sources.domain.entities import SourceDefinition, SourceKind

# 收藏栏目：用户手动挑选的源，不受分类限制
FAVORITES_CATEGORY = "focus"

_MAX_REDIRECT_HOPS = 8


@dataclass(frozen=True)
class SourceCatalog:
    """Immutable view over all source definitions and category metadata."""

    sources: Mapping[str, SourceDefinition]
    columns: Mapping[str, str] = field(default_factory=dict)
    fixed_columns: tuple[str, ...] = ()

    def get(self, source_id: str) -> SourceDefinition | None:
        return self.sources.get(source_id)

    def resolve(self, source_id: str) -> str | None:
        """Follow redirects and return the canonical enabled id.

        Returns ``None`` for unknown ids, disabled targets and redirect cycles.
        """
        current = source_id
        for _ in range(_MAX_REDIRECT_HOPS):
            definition = self.sources.get(current)
            if definition is None:
                return None
            if definition.redirect:
                current = definition.redirect
                continue
            if definition.disable:
                return None
            return current
        return None

    def name_of(self, source_id: str) -> str:
        definition = self.sources.get(source_id)
        if definition is None:
            return source_id
        return definition.display_name

    def interval_of(self, source_id: str) -> int:
        definition = self.sources.get(source_id)
        if definition is None:
            return 0
        return definition.interval_ms

    def canonical_ids(self) -> list[str]:
        """All enabled, non-redirecting ids in catalog order."""
        return [
            source_id
            for source_id, definition in self.sources.items()
            if not definition.redirect and not definition.disable
        ]

    def default_sources(self, category: str) -> list[str]:
        """Default source list for a fixed category."""
        if category == FAVORITES_CATEGORY:
            return []
        return [
            source_id
            for source_id in self.canonical_ids()
            if self.belongs_to(source_id, category)
        ]

    def belongs_to(self, source_id: str, category: str) -> bool:
        """Whether a canonical id is a valid member of ``category``."""
        definition = self.sources.get(source_id)
        if definition is None or definition.redirect or definition.disable:
            return False
        if category == FAVORITES_CATEGORY:
            return True
        if category == SourceKind.HOTTEST:
            return definition.kind == SourceKind.HOTTEST
        if category == SourceKind.REALTIME:
            return definition.kind == SourceKind.REALTIME
        return definition.column == category

    def fixed_categories(self) -> list[str]:
        return list(self.fixed_columns)

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[SourceDefinition],
        columns: Mapping[str, str] | None = None,
        fixed_columns: Iterable[str] = (),
    ) -> "SourceCatalog":
        return cls(
            sources={definition.id: definition for definition in definitions},
            columns=dict(columns or {}),
            fixed_columns=tuple(fixed_columns),
        )


@dataclass(frozen=True)
class LoadedCatalog:
    """Catalog plus where it was loaded from."""

    catalog: SourceCatalog
    loaded_from: Literal["remote", "snapshot"]


class SourceCatalogProvider(Protocol):
    """Port for loading the source catalog."""

    async def load_catalog(self) -> LoadedCatalog: ...
