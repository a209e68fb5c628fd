"""Bearer credential held by the client."""

from loguru import logger

from src.modules.preferences.domain.ports import DurableStorage

CREDENTIAL_STORAGE_KEY = "jwt"


class CredentialStore:
    """Reads, saves and clears the session token in durable storage."""

    def __init__(self, storage: DurableStorage) -> None:
        self._storage = storage

    def get(self) -> str | None:
        try:
            token = self._storage.get(CREDENTIAL_STORAGE_KEY)
        except OSError as exc:
            logger.warning(f"Reading credential failed: {exc}")
            return None
        return token or None

    def set(self, token: str) -> None:
        self._storage.set(CREDENTIAL_STORAGE_KEY, token)

    def clear(self) -> None:
        try:
            self._storage.delete(CREDENTIAL_STORAGE_KEY)
        except OSError as exc:
            logger.error(f"Clearing credential failed: {exc}")

    @property
    def present(self) -> bool:
        return self.get() is not None
