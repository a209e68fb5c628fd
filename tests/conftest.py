"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（不依赖外部服务，Redis/Postgres/上游均以内存实现替代）

使用方法：
    # 运行所有测试
    uv run pytest

    # 运行带覆盖率
    uv run pytest --cov=src --cov-report=html
"""

from collections.abc import Callable

import pytest

from src.modules.sources.domain.catalog import SourceCatalog
from src.modules.sources.domain.entities import NewsItem, SourceDefinition, SourceKind
from src.modules.users.domain.entities import UserRecord
from src.modules.users.domain.repository import UserRecordRepository

# ============================================
# 基础 Fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class ManualClock:
    """可手动推进的毫秒时钟。"""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


# ============================================
# 信息源目录 Fixtures
# ============================================


def build_catalog() -> SourceCatalog:
    return SourceCatalog.from_definitions(
        [
            SourceDefinition(
                id="x",
                name="X News",
                column="tech",
                kind=SourceKind.HOTTEST,
                interval_ms=600_000,
            ),
            SourceDefinition(
                id="y",
                name="Y",
                title="Latest",
                column="tech",
                kind=SourceKind.REALTIME,
                interval_ms=60_000,
            ),
            SourceDefinition(
                id="z",
                name="Zed",
                column="world",
                kind=SourceKind.REALTIME,
                interval_ms=300_000,
            ),
            SourceDefinition(id="old-x", name="X News", redirect="x"),
            SourceDefinition(id="dead", name="Dead", column="tech", disable=True),
        ],
        columns={
            "focus": "关注",
            "hottest": "最热",
            "realtime": "实时",
            "tech": "科技",
            "world": "国际",
        },
        fixed_columns=["focus", "hottest", "realtime", "tech", "world"],
    )


@pytest.fixture
def catalog() -> SourceCatalog:
    return build_catalog()


def make_item(
    item_id: str,
    pub_date: int | float | str | None = None,
    extra: dict | None = None,
) -> NewsItem:
    return NewsItem(
        id=item_id,
        title=f"title {item_id}",
        url=f"https://news.example.com/{item_id}",
        pub_date=pub_date,
        extra=extra,
    )


@pytest.fixture
def item_factory() -> Callable[..., NewsItem]:
    return make_item


# ============================================
# 存储 Fixtures
# ============================================


class MemoryStorage:
    """内存版 DurableStorage，可注入写失败。"""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes += 1
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


class InMemoryUserRecordRepository(UserRecordRepository):
    """内存版用户记录仓储。"""

    def __init__(self) -> None:
        self.records: dict[str, UserRecord] = {}

    async def get(self, user_id: str) -> UserRecord | None:
        return self.records.get(user_id)

    async def save(self, record: UserRecord) -> UserRecord:
        self.records[record.user_id] = record
        return record


@pytest.fixture
def user_record_repository() -> InMemoryUserRecordRepository:
    return InMemoryUserRecordRepository()
