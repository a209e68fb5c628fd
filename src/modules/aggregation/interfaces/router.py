"""Aggregation API routes."""

from fastapi import APIRouter, Depends, Query, status

from src.core.application.security import get_optional_user_id
from src.core.config import settings
from src.core.domain.exceptions import AuthenticationRequiredError
from src.modules.aggregation.application.dependencies import get_aggregate_feed_service
from src.modules.aggregation.application.service import AggregateFeedService
from src.modules.aggregation.interfaces.schemas import AggregateResponse

router = APIRouter(prefix="/s", tags=["aggregation"])


def parse_source_ids(raw: str | None) -> list[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


@router.get(
    "/aggregate",
    response_model=AggregateResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="聚合多个信息源",
    description="并行获取指定信息源数据，合并后按时间降序排序",
)
async def aggregate_sources(
    source_ids: str | None = Query(None, alias="sourceIds"),
    latest: str | None = Query(None, description="为 true 时强制拉取最新数据"),
    user_id: str | None = Depends(get_optional_user_id),
    service: AggregateFeedService = Depends(get_aggregate_feed_service),
) -> AggregateResponse:
    force_fresh = latest == "true"
    if force_fresh and settings.AGGREGATE_FORCE_REQUIRES_AUTH and user_id is None:
        raise AuthenticationRequiredError("登录后可以强制拉取最新数据")

    payload = await service.get_feed(parse_source_ids(source_ids), force_fresh)
    return AggregateResponse.model_validate(payload)
