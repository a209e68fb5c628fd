"""File-backed durable client storage."""

import json
import os
import tempfile
from pathlib import Path

from loguru import logger

from src.core.config import settings


class JsonFileStorage:
    """String key-value storage kept in one JSON file.

    Writes go to a temporary file that replaces the target, so a crash never
    leaves a half-written file behind.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings.CLIENT_STORAGE_PATH
        self._values = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.warning(f"Ignoring corrupt client storage {self.path}: {exc}")
            return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(k): v for k, v in parsed.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._flush()

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
