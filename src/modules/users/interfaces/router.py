"""User record API routes: remote sync and aggregated views."""

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from src.core.application.security import get_current_user_id
from src.core.interfaces.http.response import MutationResponse
from src.modules.users.application.dependencies import (
    get_aggregated_view_service,
    get_sync_service,
)
from src.modules.users.application.sync_service import SyncService
from src.modules.users.application.view_service import AggregatedViewService
from src.modules.users.interfaces.schemas import (
    AggregatedViewResponse,
    SyncPushResponse,
    SyncRecordResponse,
)

router = APIRouter(prefix="/me", tags=["me"])


# ============ Remote sync ============


@router.get(
    "/sync",
    response_model=SyncRecordResponse,
    summary="获取服务端配置记录",
)
async def pull_record(
    user_id: str = Depends(get_current_user_id),
    service: SyncService = Depends(get_sync_service),
) -> SyncRecordResponse:
    return SyncRecordResponse.model_validate(await service.pull(user_id))


@router.post(
    "/sync",
    response_model=SyncPushResponse,
    summary="保存客户端配置记录",
)
async def push_record(
    payload: Any = Body(None),
    user_id: str = Depends(get_current_user_id),
    service: SyncService = Depends(get_sync_service),
) -> SyncPushResponse:
    return SyncPushResponse.model_validate(await service.push(user_id, payload))


# ============ Aggregated views ============


@router.get(
    "/aggregated-views",
    response_model=list[AggregatedViewResponse],
    summary="获取全部聚合视图",
)
async def list_views(
    user_id: str = Depends(get_current_user_id),
    service: AggregatedViewService = Depends(get_aggregated_view_service),
) -> list[AggregatedViewResponse]:
    views = await service.list_views(user_id)
    return [AggregatedViewResponse.from_view(view) for view in views]


@router.get(
    "/aggregated-views/{view_id}",
    response_model=AggregatedViewResponse,
    summary="获取指定聚合视图",
)
async def get_view(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AggregatedViewService = Depends(get_aggregated_view_service),
) -> AggregatedViewResponse:
    return AggregatedViewResponse.from_view(await service.get_view(user_id, view_id))


@router.post(
    "/aggregated-views",
    response_model=MutationResponse[AggregatedViewResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="创建聚合视图",
)
async def create_view(
    payload: Any = Body(None),
    user_id: str = Depends(get_current_user_id),
    service: AggregatedViewService = Depends(get_aggregated_view_service),
) -> MutationResponse[AggregatedViewResponse]:
    view = await service.create_view(user_id, payload)
    return MutationResponse(config=AggregatedViewResponse.from_view(view))


@router.put(
    "/aggregated-views/{view_id}",
    response_model=MutationResponse[AggregatedViewResponse],
    response_model_exclude_none=True,
    summary="更新聚合视图",
)
async def update_view(
    view_id: str,
    payload: Any = Body(None),
    user_id: str = Depends(get_current_user_id),
    service: AggregatedViewService = Depends(get_aggregated_view_service),
) -> MutationResponse[AggregatedViewResponse]:
    view = await service.update_view(user_id, view_id, payload)
    return MutationResponse(config=AggregatedViewResponse.from_view(view))


@router.delete(
    "/aggregated-views/{view_id}",
    response_model=MutationResponse[AggregatedViewResponse],
    response_model_exclude_none=True,
    summary="删除聚合视图",
)
async def delete_view(
    view_id: str,
    user_id: str = Depends(get_current_user_id),
    service: AggregatedViewService = Depends(get_aggregated_view_service),
) -> MutationResponse[AggregatedViewResponse]:
    await service.delete_view(user_id, view_id)
    return MutationResponse(message="聚合视图配置已成功删除")
