"""User record entity-model mapper."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.users.domain.entities import UserRecord
from src.modules.users.infrastructure.models import UserRecordModel


class UserRecordMapper(BaseMapper[UserRecord, UserRecordModel]):
    """User record entity-model mapper."""

    def to_domain(self, model: UserRecordModel) -> UserRecord:
        return UserRecord(
            user_id=model.user_id,
            body=dict(model.data or {}),
            updated_ms=model.updated_ms,
        )

    def to_model(self, entity: UserRecord) -> UserRecordModel:
        return UserRecordModel(
            user_id=entity.user_id,
            data=entity.body,
            updated_ms=entity.updated_ms,
        )
