"""Source application services."""

from collections.abc import Callable

from loguru import logger

from src.modules.sources.domain.catalog import (
    LoadedCatalog,
    SourceCatalog,
    SourceCatalogProvider,
)
from src.modules.sources.domain.entities import SourceDefinition
from src.modules.sources.domain.exceptions import CatalogUnavailableError
from src.modules.sources.domain.getter import GetterRegistry

RegistryBuilder = Callable[[SourceCatalog], GetterRegistry]


class SourceCatalogService:
    """Holds the current catalog and the getter registry derived from it.

    ``refresh()`` swaps both atomically, so readers always see a matching pair.
    """

    def __init__(
        self,
        provider: SourceCatalogProvider,
        registry_builder: RegistryBuilder,
        initial: SourceCatalog | None = None,
    ) -> None:
        self._provider = provider
        self._registry_builder = registry_builder
        self._catalog: SourceCatalog | None = None
        self._getters = GetterRegistry()
        self.loaded_from: str | None = None
        if initial is not None:
            self._install(initial, "snapshot")

    def _install(self, catalog: SourceCatalog, loaded_from: str) -> None:
        self._catalog = catalog
        self._getters = self._registry_builder(catalog)
        self.loaded_from = loaded_from

    @property
    def catalog(self) -> SourceCatalog:
        if self._catalog is None:
            raise CatalogUnavailableError("Source catalog has not been loaded")
        return self._catalog

    @property
    def getters(self) -> GetterRegistry:
        return self._getters

    async def refresh(self) -> LoadedCatalog:
        """Reload the catalog through the provider and rebuild getters."""
        loaded = await self._provider.load_catalog()
        self._install(loaded.catalog, loaded.loaded_from)
        logger.info(
            f"Source catalog loaded from {loaded.loaded_from}: "
            f"{len(loaded.catalog.sources)} definitions, {len(self._getters)} getters"
        )
        return loaded

    def list_sources(self, include_redirects: bool = False) -> list[SourceDefinition]:
        return [
            definition
            for definition in self.catalog.sources.values()
            if not definition.disable
            and (include_redirects or not definition.redirect)
        ]
