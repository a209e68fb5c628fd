"""基础设施组件的健康检查结果。"""

from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class ComponentHealth(BaseModel):
    """Postgres / Redis 的单项检查结果。"""

    status: HealthStatus = Field(..., description="健康状态")
    connected: bool = Field(..., description="是否已连接")
    version: str | None = Field(None, description="服务端版本")
    error: str | None = Field(None, description="错误信息")

    @property
    def ok(self) -> bool:
        return self.status == HealthStatus.OK

    def to_dict(self) -> dict[str, str | bool | None]:
        return self.model_dump(mode="json", exclude_none=True)


def overall_status(database: ComponentHealth, redis: ComponentHealth) -> str:
    """汇总服务状态。

    Redis 不可用时聚合接口直接返回 500，视为 unhealthy；
    仅数据库不可用时聚合仍可用、同步接口失效，视为 degraded。
    """
    if not redis.ok:
        return "unhealthy"
    if not database.ok:
        return "degraded"
    return "healthy"
