"""Source API routes."""

from fastapi import APIRouter, Depends, Query, status

from src.modules.sources.application.dependencies import get_source_catalog_service
from src.modules.sources.application.services import SourceCatalogService
from src.modules.sources.domain.entities import SourceDefinition
from src.modules.sources.interfaces.schemas import CatalogResponse, SourceResponse

router = APIRouter(prefix="/sources", tags=["sources"])


def _to_source_response(definition: SourceDefinition) -> SourceResponse:
    return SourceResponse(
        id=definition.id,
        name=definition.name,
        title=definition.title,
        column=definition.column,
        type=definition.kind.value if definition.kind else None,
        interval=definition.interval_ms,
        home=definition.home,
        color=definition.color,
        redirect=definition.redirect,
    )


@router.get(
    "",
    response_model=CatalogResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="信息源目录",
    description="返回栏目、各固定栏目的默认源以及全部可用信息源",
)
async def get_catalog(
    include_redirects: bool = Query(False, alias="includeRedirects"),
    service: SourceCatalogService = Depends(get_source_catalog_service),
) -> CatalogResponse:
    catalog = service.catalog
    return CatalogResponse(
        columns=dict(catalog.columns),
        fixed_columns=catalog.fixed_categories(),
        defaults={
            category: catalog.default_sources(category)
            for category in catalog.fixed_categories()
        },
        sources=[
            _to_source_response(definition)
            for definition in service.list_sources(include_redirects)
        ],
        loaded_from=service.loaded_from,
    )
