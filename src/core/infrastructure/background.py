"""后台任务队列。

请求处理中的"发出即忘"操作（如信息源缓存回写）通过此队列在事件循环上
以独立任务运行：调用方不等待结果，任务失败只进入队列自己的错误通道
（loguru + 业务事件日志），不会影响请求本身。
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from loguru import logger

from src.core.infrastructure.logging import BusinessEvents

ErrorHandler = Callable[[str, BaseException], None]


class BackgroundTaskQueue:
    """Detached task runner with an isolated error channel."""

    def __init__(self, name: str, on_error: ErrorHandler | None = None) -> None:
        self.name = name
        self._on_error = on_error
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], label: str) -> asyncio.Task[Any] | None:
        """Schedule ``coro`` without awaiting it.

        Returns the created task, or ``None`` when the queue is already closed
        (the coroutine is closed so it never runs).
        """
        if self._closed:
            coro.close()
            logger.warning(f"Background queue {self.name} is closed, dropping {label}")
            return None

        task = asyncio.create_task(coro, name=f"{self.name}:{label}")
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, label))
        return task

    def _on_done(self, task: asyncio.Task[Any], label: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return

        logger.error(f"Background task {self.name}:{label} failed: {exc}")
        BusinessEvents.background_task_failed(
            queue=self.name, label=label, error=str(exc)
        )
        if self._on_error is not None:
            try:
                self._on_error(label, exc)
            except Exception as handler_exc:
                logger.error(
                    f"Background queue {self.name} error handler raised: {handler_exc}"
                )

    async def drain(self) -> None:
        """等待当前所有任务结束（测试与关停时使用）。"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """停止接收新任务，等待进行中的任务，超时后取消剩余任务。"""
        self._closed = True
        if not self._tasks:
            return
        _, still_running = await asyncio.wait(list(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(
                f"Background queue {self.name} cancelled {len(still_running)} task(s) on shutdown"
            )
            await asyncio.gather(*still_running, return_exceptions=True)
