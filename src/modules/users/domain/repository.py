"""User record repository interface."""

from abc import ABC, abstractmethod

from src.modules.users.domain.entities import UserRecord


class UserRecordRepository(ABC):
    """按用户 ID 读写配置记录"""

    @abstractmethod
    async def get(self, user_id: str) -> UserRecord | None:
        """获取用户记录，不存在时返回 None"""
        pass

    @abstractmethod
    async def save(self, record: UserRecord) -> UserRecord:
        """整体写入用户记录（存在则覆盖）"""
        pass
