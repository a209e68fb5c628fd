"""Sync engine: reconcile the local record with the server copy.

Local use never depends on the server. On start the engine pulls once (when a
credential is present) and merges the server record through the store's
freshness rule. Every accepted ``manual`` write re-arms a debounce timer; when
the quiet window elapses, the record is pushed if it differs from the last
synced baseline.

``_baseline`` mirrors what the server holds: it is taken from the pulled
record (whether or not it wins locally) and from each successful push.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.preferences.application.credentials import CredentialStore
from src.modules.preferences.application.store import LocalConfigurationStore
from src.modules.preferences.domain.entities import ConfigurationRecord, SyncAction
from src.modules.preferences.domain.exceptions import (
    SyncFailedError,
    SyncNotProvisionedError,
)
from src.modules.preferences.domain.ports import SyncGateway, SyncNotifier
from src.modules.preferences.domain.preprocess import preprocess

AUTH_FAILED_MESSAGE = "身份校验失败，无法同步，请重新登录"


class LoggingSyncNotifier:
    """Fallback notifier that only writes a log line."""

    def auth_failed(self, message: str) -> None:
        logger.warning(f"Sync notifier: {message}")


class DebounceScheduler:
    """Coalesce bursts of ``schedule()`` calls into one callback run.

    Each call restarts the quiet window. If the previous run is still in flight
    when the window elapses, the timer re-arms instead of overlapping runs.
    """

    def __init__(self, delay_sec: float, callback: Callable[[], Awaitable[object]]) -> None:
        self.delay_sec = delay_sec
        self._callback = callback
        self._timer: asyncio.Task[None] | None = None
        self._running: asyncio.Task[object] | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def running(self) -> bool:
        return self._running is not None and not self._running.done()

    def schedule(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.create_task(self._wait_then_fire())

    async def _wait_then_fire(self) -> None:
        await asyncio.sleep(self.delay_sec)
        self._timer = None
        if self.running:
            self.schedule()
            return
        self._running = asyncio.create_task(self._callback())

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_idle(self) -> None:
        """Wait for an in-flight run (not for a pending timer)."""
        if self._running is not None:
            await asyncio.gather(self._running, return_exceptions=True)


class SyncEngine:
    """Pull-on-start, debounced push-on-change synchronization."""

    def __init__(
        self,
        store: LocalConfigurationStore,
        gateway: SyncGateway,
        credentials: CredentialStore,
        notifier: SyncNotifier | None = None,
        *,
        debounce_sec: float | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.credentials = credentials
        self.notifier = notifier or LoggingSyncNotifier()
        self._baseline = ""
        self._pull_task: asyncio.Task[bool] | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._scheduler = DebounceScheduler(
            settings.SYNC_PUSH_DEBOUNCE_SEC if debounce_sec is None else debounce_sec,
            self.push,
        )

    @property
    def baseline(self) -> str:
        return self._baseline

    @property
    def push_pending(self) -> bool:
        return self._scheduler.pending

    def start(self) -> asyncio.Task[bool] | None:
        """Observe the store and fire the initial pull (once, if authenticated)."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_store_write)
        if not self.credentials.present:
            return None
        if self._pull_task is None or self._pull_task.done():
            self._pull_task = asyncio.create_task(self.pull())
        return self._pull_task

    def _on_store_write(self, record: ConfigurationRecord) -> None:
        if record.action == SyncAction.MANUAL:
            self._scheduler.schedule()

    async def pull(self) -> bool:
        """Merge the server record into the store; returns whether it was applied."""
        token = self.credentials.get()
        if token is None:
            return False

        try:
            remote = await self.gateway.pull(token)
        except SyncNotProvisionedError:
            BusinessEvents.sync_not_provisioned(direction="pull")
            return False
        except SyncFailedError as exc:
            self._handle_failure("pull", exc)
            return False

        candidate = remote.to_candidate()
        if candidate is None:
            return False

        merged = preprocess(candidate, self.store.catalog)
        applied = self.store.write(merged)
        # 基线取服务端内容，而非合并后的本地记录
        self._baseline = merged.sync_snapshot()
        BusinessEvents.sync_pulled(applied=applied, updated_time=remote.updated_time)
        return applied

    async def push(self) -> bool:
        """Push the current record when it is a local edit not yet synced."""
        token = self.credentials.get()
        if token is None:
            return False

        record = self.store.read()
        if record.action != SyncAction.MANUAL:
            return False
        snapshot = record.sync_snapshot()
        if snapshot == self._baseline:
            return False

        try:
            await self.gateway.push(record, token)
        except SyncNotProvisionedError:
            BusinessEvents.sync_not_provisioned(direction="push")
            return False
        except SyncFailedError as exc:
            self._handle_failure("push", exc)
            return False

        self._baseline = snapshot
        BusinessEvents.sync_pushed(updated_time=record.updated_time)
        return True

    def _handle_failure(self, direction: str, exc: SyncFailedError) -> None:
        # 本地记录保持不变，仅清除凭证并提示重新登录
        logger.warning(f"Sync {direction} failed: {exc}")
        BusinessEvents.sync_failed(direction=direction, error=str(exc))
        self.credentials.clear()
        self.notifier.auth_failed(AUTH_FAILED_MESSAGE)

    async def flush(self) -> bool:
        """Skip the quiet window and push now (e.g. before shutdown)."""
        self._scheduler.cancel()
        await self._scheduler.wait_idle()
        return await self.push()

    async def close(self) -> None:
        """Stop observing the store and cancel the pending push timer."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._scheduler.cancel()
        await self._scheduler.wait_idle()
        if self._pull_task is not None:
            await asyncio.gather(self._pull_task, return_exceptions=True)
