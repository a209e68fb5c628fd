"""Tests for the local configuration store and record preprocessing."""

import pytest

from src.modules.preferences.application.store import (
    METADATA_STORAGE_KEY,
    LocalConfigurationStore,
)
from src.modules.preferences.domain.entities import (
    AggregatedView,
    ConfigurationRecord,
    SyncAction,
)
from src.modules.preferences.domain.exceptions import UnknownCategoryError
from src.modules.preferences.domain.preprocess import preprocess


def _record(updated_time: int, **fields) -> ConfigurationRecord:
    return ConfigurationRecord(updated_time=updated_time, **fields)


def test_pin_toggle_bumps_write_time(catalog, clock) -> None:
    store = LocalConfigurationStore(
        _record(100, data={"tech": ["a", "b"]}), catalog, clock=lambda: 150
    )

    store.toggle_pin("tech")

    record = store.read()
    assert record.pinned_columns == ["tech"]
    assert record.updated_time == 150
    assert record.action == SyncAction.MANUAL
    assert record.data == {"tech": ["a", "b"]}


def test_write_same_time_twice_applies_once(catalog) -> None:
    store = LocalConfigurationStore(_record(100), catalog)
    candidate = _record(200, data={"tech": ["x"]})
    notified: list[int] = []
    store.subscribe(lambda record: notified.append(record.updated_time))

    assert store.write(candidate) is True
    assert store.write(candidate.model_copy(update={"data": {"tech": ["y"]}})) is False

    assert store.read() == candidate
    assert notified == [200]


@pytest.mark.parametrize(("updated_time", "accepted"), [(99, False), (100, False), (101, True)])
def test_monotonic_acceptance(catalog, updated_time, accepted) -> None:
    held = _record(100, data={"tech": ["x"]})
    store = LocalConfigurationStore(held, catalog)

    assert store.write(_record(updated_time)) is accepted
    assert (store.read() is held) is not accepted


def test_local_writes_never_lose_to_a_slow_clock(catalog) -> None:
    store = LocalConfigurationStore(_record(5_000), catalog, clock=lambda: 10)

    store.toggle_pin("tech")
    store.toggle_pin("world")

    assert store.read().updated_time == 5_002
    assert store.read().pinned_columns == ["tech", "world"]


def test_accepted_writes_are_persisted(catalog, memory_storage) -> None:
    store = LocalConfigurationStore(_record(1), catalog, memory_storage)

    store.set_category_sources("tech", ["y", "x", "y"])

    stored = ConfigurationRecord.model_validate_json(
        memory_storage.values[METADATA_STORAGE_KEY]
    )
    assert stored.data["tech"] == ["y", "x"]
    assert stored == store.read()


def test_persist_failure_keeps_record_in_memory(catalog, memory_storage) -> None:
    memory_storage.fail_writes = True
    store = LocalConfigurationStore(_record(1), catalog, memory_storage)

    store.toggle_pin("tech")

    assert store.read().pinned_columns == ["tech"]
    assert METADATA_STORAGE_KEY not in memory_storage.values


def test_unknown_category_is_rejected(catalog) -> None:
    store = LocalConfigurationStore(_record(1), catalog)

    with pytest.raises(UnknownCategoryError):
        store.set_category_sources("sports", ["x"])
    assert store.read().updated_time == 1


def test_unsubscribe_stops_notifications(catalog) -> None:
    store = LocalConfigurationStore(_record(1), catalog)
    seen: list[int] = []
    unsubscribe = store.subscribe(lambda record: seen.append(record.updated_time))

    store.write(_record(2))
    unsubscribe()
    store.write(_record(3))

    assert seen == [2]


# ============ 加载与预处理 ============


def test_load_without_stored_record_uses_catalog_defaults(catalog, memory_storage) -> None:
    store = LocalConfigurationStore.load(memory_storage, catalog)

    record = store.read()
    assert record.updated_time == 0
    assert record.action == SyncAction.INIT
    assert record.data == {
        "focus": [],
        "hottest": ["x"],
        "realtime": ["y", "z"],
        "tech": ["x", "y"],
        "world": ["z"],
    }


def test_load_preprocesses_recovered_record(catalog, memory_storage) -> None:
    view = AggregatedView(id="v1", name="Mine", sources=["x"], created_at=1, updated_at=1)
    recovered = _record(
        300,
        action=SyncAction.MANUAL,
        data={"tech": ["y", "old-x", "dead", "gone", "z"], "legacy": ["x"]},
        pinned_columns=["tech"],
        aggregated_views=[view],
    )
    memory_storage.values[METADATA_STORAGE_KEY] = recovered.to_storage()

    record = LocalConfigurationStore.load(memory_storage, catalog).read()

    assert record.action == SyncAction.INIT
    assert record.updated_time == 300
    assert record.data["tech"] == ["y", "x"]
    assert record.data["focus"] == []
    assert "legacy" not in record.data
    assert record.pinned_columns == ["tech"]
    assert record.aggregated_views == [view]


def test_load_ignores_corrupt_storage(catalog, memory_storage) -> None:
    memory_storage.values[METADATA_STORAGE_KEY] = '{"updatedTime": "soon"'

    record = LocalConfigurationStore.load(memory_storage, catalog).read()

    assert record.updated_time == 0
    assert record.data["world"] == ["z"]


def test_preprocess_round_trip_is_idempotent(catalog) -> None:
    record = _record(
        10,
        data={
            "focus": ["z", "old-x", "z", "nope"],
            "tech": ["dead", "y"],
            "hottest": ["y"],
        },
    )

    once = preprocess(record, catalog)
    twice = preprocess(ConfigurationRecord.model_validate_json(once.to_storage()), catalog)

    assert twice == once
    assert once.data["focus"] == ["z", "x"]
    assert once.data["tech"] == ["y", "x"]
    assert once.data["hottest"] == ["x"]


def test_record_wire_format_uses_camel_case() -> None:
    record = ConfigurationRecord.model_validate(
        {
            "updatedTime": 7,
            "data": {"tech": ["x"]},
            "pinnedColumns": ["tech"],
            "aggregatedViews": [
                {"id": "v", "name": "n", "sources": ["x"], "createdAt": 1, "updatedAt": 2}
            ],
        }
    )

    payload = record.sync_payload()
    assert payload["updatedTime"] == 7
    assert payload["aggregatedViews"][0]["updatedAt"] == 2
    assert '"updatedTime"' not in record.sync_snapshot()


# ============ 派生读取 ============


def test_effective_sources_orders_favorites_first(catalog) -> None:
    store = LocalConfigurationStore(
        _record(1, data={"tech": ["x", "y"], "focus": ["z", "y"]}), catalog
    )

    assert store.effective_sources("tech") == ["y", "x"]
    assert store.effective_sources("focus") == ["z", "y"]


def test_effective_sources_appends_newly_favorited_members(catalog) -> None:
    store = LocalConfigurationStore(
        _record(1, data={"tech": ["x"], "focus": ["z", "y"]}), catalog
    )

    assert store.effective_sources("tech") == ["y", "x"]
    assert store.effective_sources("world") == ["z"]


def test_toggle_favorite(catalog) -> None:
    store = LocalConfigurationStore(_record(1, data={"focus": ["x"]}), catalog)

    store.toggle_favorite("y")
    assert store.read().data["focus"] == ["x", "y"]
    store.toggle_favorite("x")
    assert store.read().data["focus"] == ["y"]
