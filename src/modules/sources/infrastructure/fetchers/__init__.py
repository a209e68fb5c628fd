"""信息源 getter 模块。"""

from src.modules.sources.infrastructure.fetchers.factory import GetterFactory
from src.modules.sources.infrastructure.fetchers.newsnow import NewsNowGetter

__all__ = [
    "GetterFactory",
    "NewsNowGetter",
]
