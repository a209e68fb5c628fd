"""Getter port: one async callable per source id."""

from collections.abc import Awaitable, Callable, Iterator, Mapping

from src.modules.sources.domain.entities import NewsItem

# getter(force_fresh) -> items；失败时抛出 UpstreamFetchError
SourceGetter = Callable[[bool], Awaitable[list[NewsItem]]]


class GetterRegistry(Mapping[str, SourceGetter]):
    """Read-only mapping of canonical source id to its getter."""

    def __init__(self, getters: Mapping[str, SourceGetter] | None = None) -> None:
        self._getters: dict[str, SourceGetter] = dict(getters or {})

    def __getitem__(self, source_id: str) -> SourceGetter:
        return self._getters[source_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._getters)

    def __len__(self) -> int:
        return len(self._getters)

    def register(self, source_id: str, getter: SourceGetter) -> None:
        self._getters[source_id] = getter
