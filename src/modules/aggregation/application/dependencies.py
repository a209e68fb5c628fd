"""Aggregation module application dependencies."""

from typing import NoReturn

from src.modules.aggregation.application.service import AggregateFeedService


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_aggregate_feed_service() -> AggregateFeedService:
    _missing_dependency("AggregateFeedService")
