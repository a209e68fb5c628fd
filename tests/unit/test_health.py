"""Tests for the /health status summary."""

import pytest

from src.core.infrastructure.health import ComponentHealth, HealthStatus, overall_status

UP = ComponentHealth(status=HealthStatus.OK, connected=True, version="7.2")
DOWN = ComponentHealth(status=HealthStatus.ERROR, connected=False, error="refused")


@pytest.mark.parametrize(
    ("database", "redis", "expected"),
    [
        (UP, UP, "healthy"),
        (DOWN, UP, "degraded"),
        (UP, DOWN, "unhealthy"),
        (DOWN, DOWN, "unhealthy"),
    ],
)
def test_overall_status(database, redis, expected) -> None:
    assert overall_status(database, redis) == expected
