"""Ranking timestamp resolution for news items.

Priority: ``pubDate`` -> ``extra.date`` -> fallback. Each value may be a numeric
epoch (seconds or milliseconds) or a date string; values that cannot be
interpreted fall through to the next priority.
"""

import math
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from src.modules.sources.domain.entities import NewsItem

# 大于该值的数字按毫秒处理，否则按秒
_MS_THRESHOLD = 1_000_000_000_000


def coerce_epoch_ms(value: object) -> int | None:
    """Convert a numeric epoch or date string into epoch milliseconds."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value <= 0:
            return None
        if value > _MS_THRESHOLD:
            return int(value)
        return int(value * 1000)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.isdigit():
        return coerce_epoch_ms(int(text))

    parsed = _parse_date_string(text)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp() * 1000)


def _parse_date_string(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


def resolve_item_timestamp(item: NewsItem, fallback_ms: int) -> int:
    resolved = coerce_epoch_ms(item.pub_date)
    if resolved is not None:
        return resolved
    if item.extra:
        resolved = coerce_epoch_ms(item.extra.get("date"))
        if resolved is not None:
            return resolved
    return fallback_ms
