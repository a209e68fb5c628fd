"""Tests for the sync engine."""

import asyncio

import pytest

from src.modules.preferences.application.credentials import CredentialStore
from src.modules.preferences.application.store import LocalConfigurationStore
from src.modules.preferences.application.sync_engine import (
    AUTH_FAILED_MESSAGE,
    DebounceScheduler,
    SyncEngine,
)
from src.modules.preferences.domain.entities import (
    ConfigurationRecord,
    RemoteRecord,
    SyncAction,
)
from src.modules.preferences.domain.exceptions import (
    SyncFailedError,
    SyncNotProvisionedError,
)
from src.modules.preferences.domain.preprocess import preprocess

pytestmark = pytest.mark.anyio

DEBOUNCE = 0.02


class FakeGateway:
    def __init__(self, remote: RemoteRecord | None = None) -> None:
        self.remote = remote or RemoteRecord()
        self.pull_error: Exception | None = None
        self.push_error: Exception | None = None
        self.pulls = 0
        self.pushed: list[ConfigurationRecord] = []
        self.tokens: list[str] = []
        self.release: asyncio.Event | None = None
        self.pull_release: asyncio.Event | None = None

    async def pull(self, token: str) -> RemoteRecord:
        self.pulls += 1
        self.tokens.append(token)
        if self.pull_release is not None:
            await self.pull_release.wait()
        if self.pull_error is not None:
            raise self.pull_error
        return self.remote

    async def push(self, record: ConfigurationRecord, token: str) -> int:
        self.pushed.append(record)
        self.tokens.append(token)
        if self.release is not None:
            await self.release.wait()
        if self.push_error is not None:
            raise self.push_error
        return record.updated_time


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def auth_failed(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def credentials(memory_storage) -> CredentialStore:
    store = CredentialStore(memory_storage)
    store.set("token-1")
    return store


@pytest.fixture
def store(catalog, memory_storage, clock) -> LocalConfigurationStore:
    return LocalConfigurationStore.load(memory_storage, catalog, clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


def _engine(store, gateway, credentials, notifier) -> SyncEngine:
    return SyncEngine(store, gateway, credentials, notifier, debounce_sec=DEBOUNCE)


async def test_burst_of_edits_results_in_one_push(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    engine = _engine(store, gateway, credentials, notifier)
    await engine.start()

    store.toggle_pin("tech")
    store.toggle_pin("world")
    store.set_favorites(["x"])
    store.toggle_favorite("z")
    assert engine.push_pending

    await asyncio.sleep(DEBOUNCE * 5)

    assert len(gateway.pushed) == 1
    pushed = gateway.pushed[0]
    assert pushed == store.read()
    assert pushed.data["focus"] == ["x", "z"]
    assert engine.baseline == pushed.sync_snapshot()
    await engine.close()


async def test_pull_applies_newer_remote_without_pushing_it_back(
    store, credentials, notifier, catalog
) -> None:
    remote = RemoteRecord(
        data={"tech": ["old-x"]}, updated_time=500, pinned_columns=["tech"]
    )
    gateway = FakeGateway(remote)
    engine = _engine(store, gateway, credentials, notifier)

    await engine.start()
    await asyncio.sleep(DEBOUNCE * 3)

    record = store.read()
    assert record.action == SyncAction.SYNC
    assert record.updated_time == 500
    assert record.data["tech"] == ["x", "y"]
    assert record.pinned_columns == ["tech"]
    assert engine.baseline == record.sync_snapshot()
    assert gateway.pushed == []
    assert gateway.tokens == ["token-1"]
    await engine.close()


async def test_pull_older_than_local_is_discarded(catalog, credentials, notifier) -> None:
    local = ConfigurationRecord(
        updated_time=900, action=SyncAction.INIT, data={"tech": ["y"]}
    )
    store = LocalConfigurationStore(local, catalog)
    gateway = FakeGateway(RemoteRecord(data={"tech": ["x"]}, updated_time=800))
    engine = _engine(store, gateway, credentials, notifier)

    assert await engine.pull() is False

    assert store.read() is local
    assert engine.baseline == preprocess(gateway.remote.to_candidate(), catalog).sync_snapshot()
    assert engine.baseline != local.sync_snapshot()


async def test_edit_during_pull_survives_older_remote(store, credentials, notifier) -> None:
    gateway = FakeGateway(
        RemoteRecord(data={"tech": ["x"]}, updated_time=5, pinned_columns=[])
    )
    gateway.pull_release = asyncio.Event()
    engine = _engine(store, gateway, credentials, notifier)
    pull_task = engine.start()
    await asyncio.sleep(0)

    store.toggle_pin("tech")
    gateway.pull_release.set()
    assert await pull_task is False
    await asyncio.sleep(DEBOUNCE * 5)

    assert len(gateway.pushed) == 1
    assert gateway.pushed[0].pinned_columns == ["tech"]
    assert gateway.pushed[0].action == SyncAction.MANUAL
    assert engine.baseline == store.read().sync_snapshot()
    await engine.close()


async def test_newer_remote_during_edit_wins_and_is_not_pushed(
    store, credentials, notifier, clock
) -> None:
    gateway = FakeGateway(
        RemoteRecord(
            data={"tech": ["x"]},
            updated_time=clock.now + 60_000,
            pinned_columns=["world"],
        )
    )
    gateway.pull_release = asyncio.Event()
    engine = _engine(store, gateway, credentials, notifier)
    pull_task = engine.start()
    await asyncio.sleep(0)

    store.toggle_pin("tech")
    gateway.pull_release.set()
    assert await pull_task is True
    await asyncio.sleep(DEBOUNCE * 5)

    record = store.read()
    assert record.action == SyncAction.SYNC
    assert record.pinned_columns == ["world"]
    assert gateway.pushed == []
    await engine.close()


async def test_empty_remote_is_ignored(store, credentials, notifier) -> None:
    engine = _engine(store, FakeGateway(RemoteRecord()), credentials, notifier)
    before = store.read()

    assert await engine.pull() is False
    assert store.read() is before
    assert engine.baseline == ""


async def test_without_credential_sync_is_skipped(store, memory_storage, notifier) -> None:
    gateway = FakeGateway()
    engine = _engine(store, gateway, CredentialStore(memory_storage), notifier)

    assert engine.start() is None
    store.toggle_pin("tech")
    await asyncio.sleep(DEBOUNCE * 3)

    assert gateway.pulls == 0
    assert gateway.pushed == []
    await engine.close()


async def test_not_provisioned_is_a_no_op(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    gateway.pull_error = SyncNotProvisionedError()
    gateway.push_error = SyncNotProvisionedError()
    engine = _engine(store, gateway, credentials, notifier)

    assert await engine.pull() is False
    store.toggle_pin("tech")
    assert await engine.flush() is False

    assert credentials.get() == "token-1"
    assert notifier.messages == []


async def test_pull_failure_clears_credential(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    gateway.pull_error = SyncFailedError("HTTP 401", status_code=401)
    engine = _engine(store, gateway, credentials, notifier)

    await engine.start()
    await engine.close()

    assert credentials.get() is None
    assert notifier.messages == [AUTH_FAILED_MESSAGE]


async def test_push_failure_keeps_local_record(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    gateway.push_error = SyncFailedError("HTTP 500", status_code=500)
    engine = _engine(store, gateway, credentials, notifier)
    engine.start()
    await asyncio.sleep(0)

    store.toggle_pin("tech")
    edited = store.read()
    assert await engine.flush() is False

    assert store.read() is edited
    assert engine.baseline == ""
    assert credentials.get() is None
    assert notifier.messages == [AUTH_FAILED_MESSAGE]
    await engine.close()


async def test_unchanged_content_is_not_pushed(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    engine = _engine(store, gateway, credentials, notifier)

    store.toggle_pin("tech")
    assert await engine.flush() is True
    store.toggle_pin("tech")
    store.toggle_pin("tech")
    assert await engine.flush() is False

    assert len(gateway.pushed) == 1


async def test_push_waits_for_in_flight_push(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    gateway.release = asyncio.Event()
    engine = _engine(store, gateway, credentials, notifier)
    engine.start()

    store.toggle_pin("tech")
    await asyncio.sleep(DEBOUNCE * 3)
    assert len(gateway.pushed) == 1

    store.toggle_pin("world")
    await asyncio.sleep(DEBOUNCE * 5)
    assert len(gateway.pushed) == 1

    gateway.release.set()
    await asyncio.sleep(DEBOUNCE * 5)

    assert len(gateway.pushed) == 2
    assert gateway.pushed[1].pinned_columns == ["tech", "world"]
    await engine.close()


async def test_close_cancels_pending_push(store, credentials, notifier) -> None:
    gateway = FakeGateway()
    engine = _engine(store, gateway, credentials, notifier)
    engine.start()

    store.toggle_pin("tech")
    await engine.close()
    await asyncio.sleep(DEBOUNCE * 3)

    assert gateway.pushed == []
    assert not engine.push_pending


async def test_debounce_scheduler_coalesces_calls() -> None:
    runs: list[int] = []

    async def callback() -> None:
        runs.append(1)

    scheduler = DebounceScheduler(DEBOUNCE, callback)
    for _ in range(5):
        scheduler.schedule()
        await asyncio.sleep(DEBOUNCE / 4)

    await asyncio.sleep(DEBOUNCE * 3)
    await scheduler.wait_idle()

    assert runs == [1]
