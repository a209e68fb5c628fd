"""User module application dependencies.

Defines dependency providers for interfaces layer without importing infrastructure.
"""

from typing import NoReturn

from fastapi import Depends

from src.modules.users.application.sync_service import SyncService
from src.modules.users.application.view_service import AggregatedViewService
from src.modules.users.domain.repository import UserRecordRepository


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_user_record_repository() -> UserRecordRepository:
    _missing_dependency("UserRecordRepository")


async def get_sync_service(
    repository: UserRecordRepository = Depends(get_user_record_repository),
) -> SyncService:
    return SyncService(repository)


async def get_aggregated_view_service(
    repository: UserRecordRepository = Depends(get_user_record_repository),
) -> AggregatedViewService:
    return AggregatedViewService(repository)
