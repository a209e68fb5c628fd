"""HTTP client for the feed aggregation endpoint."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import httpx
from loguru import logger

from src.core.config import settings
from src.modules.aggregation.domain.entities import AggregatedItem
from src.modules.aggregation.domain.exceptions import NoValidSourcesError


@dataclass
class AggregatedFeed:
    """Parsed ``GET /s/aggregate`` response."""

    source_ids: list[str]
    updated_time: int
    items: list[AggregatedItem]
    total: int


class HttpAggregatedFeedClient:
    """Fetch aggregated feeds; the bearer credential rides only on forced refreshes."""

    def __init__(
        self,
        credential_provider: Callable[[], str | None],
        *,
        base_url: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credential_provider = credential_provider
        self.base_url = (base_url or settings.CLIENT_API_BASE_URL).rstrip("/")
        self.timeout_sec = timeout_sec or settings.CLIENT_HTTP_TIMEOUT_SEC
        self._transport = transport

    async def fetch(
        self, source_ids: Sequence[str], force_fresh: bool = False
    ) -> AggregatedFeed:
        params = {"sourceIds": ",".join(source_ids)}
        headers = {"Accept": "application/json"}
        if force_fresh:
            params["latest"] = "true"
            token = self._credential_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_sec,
            transport=self._transport,
        ) as client:
            response = await client.get("/s/aggregate", params=params, headers=headers)

        if response.status_code == 400:
            raise NoValidSourcesError(_error_message(response))
        response.raise_for_status()
        payload = response.json()
        logger.debug(
            f"Aggregated feed for {source_ids}: {payload.get('total')} items"
        )
        return AggregatedFeed(
            source_ids=list(payload.get("sourceIds", [])),
            updated_time=int(payload.get("updatedTime", 0)),
            items=[AggregatedItem.model_validate(raw) for raw in payload.get("items", [])],
            total=int(payload.get("total", 0)),
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return response.text
