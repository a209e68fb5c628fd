"""Source module dependencies."""

from src.modules.sources.application.services import SourceCatalogService
from src.modules.sources.infrastructure.catalog_provider import (
    InfrastructureSourceCatalogProvider,
)
from src.modules.sources.infrastructure.fetchers import GetterFactory

_catalog_service: SourceCatalogService | None = None


def build_source_catalog_service() -> SourceCatalogService:
    """Create a catalog service seeded with the packaged snapshot."""
    provider = InfrastructureSourceCatalogProvider()
    return SourceCatalogService(
        provider=provider,
        registry_builder=GetterFactory().build_registry,
        initial=provider.load_snapshot(),
    )


def get_source_catalog_service() -> SourceCatalogService:
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = build_source_catalog_service()
    return _catalog_service
