"""Millisecond wall clock shared by aggregation and sync code."""

import time
from collections.abc import Callable

# 返回 epoch 毫秒的时钟；测试中替换为可控实现
Clock = Callable[[], int]


def now_ms() -> int:
    return time.time_ns() // 1_000_000
