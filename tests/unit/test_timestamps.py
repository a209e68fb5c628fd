"""Tests for ranking timestamp resolution."""

import pytest

from src.modules.aggregation.domain.timestamps import (
    coerce_epoch_ms,
    resolve_item_timestamp,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1_700_000_000_000, 1_700_000_000_000),
        (1_700_000_000, 1_700_000_000_000),
        (1_700_000_000.5, 1_700_000_000_500),
        ("1700000000", 1_700_000_000_000),
        ("1700000000000", 1_700_000_000_000),
        ("2023-11-14T22:13:20Z", 1_700_000_000_000),
        ("2023-11-14T22:13:20+00:00", 1_700_000_000_000),
        ("2023-11-14 22:13:20", 1_700_000_000_000),
        ("Tue, 14 Nov 2023 22:13:20 GMT", 1_700_000_000_000),
        ("Wed, 15 Nov 2023 06:13:20 +0800", 1_700_000_000_000),
    ],
)
def test_coerce_epoch_ms(value, expected) -> None:
    assert coerce_epoch_ms(value) == expected


@pytest.mark.parametrize(
    "value", [None, True, 0, -5, float("nan"), float("inf"), "", "   ", "yesterday", [1]]
)
def test_coerce_epoch_ms_rejects_unusable_values(value) -> None:
    assert coerce_epoch_ms(value) is None


def test_resolve_priority(item_factory) -> None:
    fallback = 42
    both = item_factory("a", pub_date=1_700_000_000, extra={"date": 1_600_000_000})
    extra_only = item_factory("b", extra={"date": "2020-09-13T12:26:40Z"})
    bad_pub_date = item_factory("c", pub_date="soon", extra={"date": 1_600_000_000})
    nothing = item_factory("d", extra={"hover": "x"})

    assert resolve_item_timestamp(both, fallback) == 1_700_000_000_000
    assert resolve_item_timestamp(extra_only, fallback) == 1_600_000_000_000
    assert resolve_item_timestamp(bad_pub_date, fallback) == 1_600_000_000_000
    assert resolve_item_timestamp(nothing, fallback) == fallback
