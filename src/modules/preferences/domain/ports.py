"""Preferences ports."""

from typing import Protocol

from src.modules.preferences.domain.entities import ConfigurationRecord, RemoteRecord


class DurableStorage(Protocol):
    """Client-side string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SyncGateway(Protocol):
    """Remote copy of the configuration record.

    Raises ``SyncNotProvisionedError`` when the deployment has no remote sync and
    ``SyncFailedError`` for every other failure.
    """

    async def pull(self, token: str) -> RemoteRecord: ...

    async def push(self, record: ConfigurationRecord, token: str) -> int: ...


class SyncNotifier(Protocol):
    """User-visible channel for sync failures (re-authentication prompt)."""

    def auth_failed(self, message: str) -> None: ...
