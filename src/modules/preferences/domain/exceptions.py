"""Preferences domain exceptions."""

from src.core.domain.exceptions import (
    DomainException,
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)


class ViewValidationError(ValidationError):
    """聚合视图参数校验失败；message 为逗号连接的错误列表。"""


class ViewNameConflictError(DuplicateEntityError):
    """同一用户下已存在同名聚合视图（区分大小写）。"""

    def __init__(self, name: str):
        self.name = name
        super().__init__("AggregatedView", "name", name, message="已存在同名的聚合视图配置")


class ViewNotFoundError(EntityNotFoundError):
    """找不到指定 ID 的聚合视图。"""

    def __init__(self, view_id: str):
        self.view_id = view_id
        super().__init__("AggregatedView", view_id, message="找不到指定ID的聚合视图配置")


class UnknownCategoryError(ValidationError):
    """写入了不属于固定栏目的分类。"""

    def __init__(self, category: str):
        super().__init__(f"Unknown category '{category}'")


class SyncNotProvisionedError(DomainException):
    """服务端未开通远程同步；客户端按空操作处理。"""

    error_code = "SYNC_NOT_PROVISIONED"


class SyncFailedError(DomainException):
    """除"未开通"之外的任何同步失败。"""

    error_code = "SYNC_FAILED"

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
