"""User record repository implementation."""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.modules.users.domain.entities import UserRecord
from src.modules.users.domain.repository import UserRecordRepository
from src.modules.users.infrastructure.mappers import UserRecordMapper
from src.modules.users.infrastructure.models import UserRecordModel


class PostgreSQLUserRecordRepository(UserRecordRepository):
    """PostgreSQL user record repository implementation."""

    def __init__(self, session: AsyncSession, mapper: UserRecordMapper):
        self.session = session
        self.mapper = mapper
        self.logger = logger

    async def _get_model(self, user_id: str) -> UserRecordModel | None:
        statement = select(UserRecordModel).where(
            UserRecordModel.user_id == user_id,
            col(UserRecordModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get(self, user_id: str) -> UserRecord | None:
        model = await self._get_model(user_id)
        return self.mapper.to_domain(model) if model else None

    async def save(self, record: UserRecord) -> UserRecord:
        existing = await self._get_model(record.user_id)
        if existing is None:
            model = self.mapper.to_model(record)
        else:
            model = existing
            model.data = record.body
            model.updated_ms = record.updated_ms
            model.updated_at = datetime.now(UTC)

        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self.mapper.to_domain(model)
