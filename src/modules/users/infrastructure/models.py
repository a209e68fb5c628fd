"""User record database model."""

from typing import Any

from sqlalchemy import JSON, BigInteger
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel


class UserRecordModel(BaseModel, table=True):
    """User configuration record database model."""

    __tablename__ = "user_records"

    user_id: str = Field(index=True, nullable=False, unique=True)
    data: dict[str, Any] = Field(default_factory=dict, sa_type=JSON, nullable=False)
    updated_ms: int = Field(default=0, sa_type=BigInteger, nullable=False)
