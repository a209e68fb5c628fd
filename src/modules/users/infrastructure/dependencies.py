"""User module dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.infrastructure.database.session import get_db_session
from src.modules.users.infrastructure.mappers import UserRecordMapper
from src.modules.users.infrastructure.repositories import (
    PostgreSQLUserRecordRepository,
)


def get_user_record_mapper() -> UserRecordMapper:
    return UserRecordMapper()


async def get_user_record_repository(
    session: AsyncSession = Depends(get_db_session),
    mapper: UserRecordMapper = Depends(get_user_record_mapper),
) -> PostgreSQLUserRecordRepository:
    return PostgreSQLUserRecordRepository(session, mapper)
