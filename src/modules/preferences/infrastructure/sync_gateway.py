"""HTTP gateway for the ``/me/sync`` endpoint."""

import httpx
from loguru import logger
from pydantic import ValidationError

from src.core.config import settings
from src.modules.preferences.domain.entities import ConfigurationRecord, RemoteRecord
from src.modules.preferences.domain.exceptions import (
    SyncFailedError,
    SyncNotProvisionedError,
)


class HttpSyncGateway:
    """Pull and push the configuration record over HTTP with a bearer token."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.CLIENT_API_BASE_URL).rstrip("/")
        self.timeout_sec = timeout_sec or settings.CLIENT_HTTP_TIMEOUT_SEC
        self._transport = transport

    async def pull(self, token: str) -> RemoteRecord:
        response = await self._request("GET", token)
        try:
            return RemoteRecord.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise SyncFailedError(f"Malformed sync payload: {exc}") from exc

    async def push(self, record: ConfigurationRecord, token: str) -> int:
        response = await self._request("POST", token, json=record.sync_payload())
        try:
            body = response.json()
        except ValueError:
            return record.updated_time
        updated = body.get("updatedTime") if isinstance(body, dict) else None
        return updated if isinstance(updated, int) else record.updated_time

    async def _request(
        self, method: str, token: str, json: dict | None = None
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_sec,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    "/me/sync",
                    json=json,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/json",
                    },
                )
        except httpx.HTTPError as exc:
            logger.warning(f"Sync {method} transport error: {exc}")
            raise SyncFailedError(f"Transport error: {exc}") from exc

        if response.is_success:
            return response

        if self._is_not_provisioned(response):
            raise SyncNotProvisionedError("Remote sync is not provisioned")
        raise SyncFailedError(
            f"Sync {method} failed with HTTP {response.status_code}",
            status_code=response.status_code,
        )

    @staticmethod
    def _is_not_provisioned(response: httpx.Response) -> bool:
        return (
            response.status_code == settings.SYNC_NOT_PROVISIONED_STATUS
            and settings.SYNC_NOT_PROVISIONED_MARKER in response.text
        )
