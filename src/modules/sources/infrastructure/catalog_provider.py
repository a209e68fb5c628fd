"""Infrastructure provider for the source catalog."""

from __future__ import annotations

import json
from ipaddress import ip_address
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
from loguru import logger

from src.core.config import settings
from src.modules.sources.domain.catalog import (
    LoadedCatalog,
    SourceCatalog,
    SourceCatalogProvider,
)
from src.modules.sources.domain.entities import SourceDefinition, SourceKind

DEFAULT_SNAPSHOT_PATH = (
    Path(__file__).resolve().parents[1] / "resources" / "catalog_snapshot.json"
)


class InfrastructureSourceCatalogProvider(SourceCatalogProvider):
    """Load source catalog from remote URL with snapshot fallback."""

    def __init__(
        self,
        *,
        catalog_url: str | None = None,
        timeout_sec: float | None = None,
        snapshot_path: Path | None = None,
    ) -> None:
        self.catalog_url = catalog_url or settings.SOURCE_CATALOG_URL
        self.timeout_sec = timeout_sec or settings.SOURCE_CATALOG_FETCH_TIMEOUT_SEC
        self.snapshot_path = snapshot_path or DEFAULT_SNAPSHOT_PATH

    async def load_catalog(self) -> LoadedCatalog:
        """Load catalog from remote, then fallback to local snapshot."""
        if self.catalog_url:
            try:
                catalog = await self._load_catalog_from_remote(self.catalog_url)
                return LoadedCatalog(catalog=catalog, loaded_from="remote")
            except (
                httpx.HTTPError,
                ValueError,
                json.JSONDecodeError,
                OSError,
            ) as exc:
                logger.warning(f"Failed to load source catalog remotely: {exc}")

        return LoadedCatalog(catalog=self.load_snapshot(), loaded_from="snapshot")

    def load_snapshot(self) -> SourceCatalog:
        payload = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
        return parse_catalog_payload(payload)

    async def _load_catalog_from_remote(self, url: str) -> SourceCatalog:
        if not self._is_allowed_public_http_url(url):
            raise ValueError("SOURCE_CATALOG_URL must be a public HTTP(S) URL")

        async with httpx.AsyncClient(
            timeout=self.timeout_sec,
            follow_redirects=False,
        ) as client:
            response = await client.get(
                url,
                headers={
                    "User-Agent": settings.FETCHER_USER_AGENT,
                    "Accept": "application/json",
                },
            )
            if 300 <= response.status_code < 400:
                raise ValueError("Redirect is not allowed for source catalog fetch")
            response.raise_for_status()
            return parse_catalog_payload(response.json())

    @staticmethod
    def _is_allowed_public_http_url(url: str) -> bool:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return False

        host = parsed.hostname
        if not host:
            return False
        if host == "localhost" or host.endswith((".local", ".internal")):
            return False

        try:
            host_ip = ip_address(host)
        except ValueError:
            return True

        if (
            host_ip.is_private
            or host_ip.is_loopback
            or host_ip.is_link_local
            or host_ip.is_reserved
            or host_ip.is_multicast
        ):
            return False
        return True


def parse_catalog_payload(payload: Any) -> SourceCatalog:
    """Parse ``{"columns", "fixed_columns", "sources"}`` into a catalog.

    Sources with ``sub`` entries are flattened into ``parent-sub`` ids that
    inherit the parent's fields; the parent id then redirects to its first
    enabled sub-source.
    """
    if not isinstance(payload, dict):
        raise ValueError("Source catalog payload must be a JSON object")

    raw_sources = payload.get("sources")
    if not isinstance(raw_sources, dict):
        raise ValueError("Source catalog payload missing 'sources' object")

    columns_value = payload.get("columns")
    columns = (
        {str(k): str(v) for k, v in columns_value.items()}
        if isinstance(columns_value, dict)
        else {}
    )
    fixed_value = payload.get("fixed_columns")
    if isinstance(fixed_value, list):
        fixed_columns = [c for c in fixed_value if isinstance(c, str)]
    else:
        fixed_columns = list(columns)

    definitions: list[SourceDefinition] = []
    for source_id, raw_value in raw_sources.items():
        if not isinstance(source_id, str) or not isinstance(raw_value, dict):
            continue

        sub_value = raw_value.get("sub")
        if not isinstance(sub_value, dict) or not sub_value:
            definitions.append(_parse_definition(source_id, raw_value, {}))
            continue

        children: list[SourceDefinition] = []
        for sub_id, sub_raw in sub_value.items():
            if not isinstance(sub_id, str) or not isinstance(sub_raw, dict):
                continue
            children.append(
                _parse_definition(f"{source_id}-{sub_id}", sub_raw, raw_value)
            )

        first_enabled = next((c.id for c in children if not c.disable), None)
        parent = _parse_definition(source_id, raw_value, {})
        definitions.append(
            SourceDefinition(
                id=parent.id,
                name=parent.name,
                column=parent.column,
                kind=parent.kind,
                interval_ms=parent.interval_ms,
                home=parent.home,
                color=parent.color,
                disable=parent.disable or first_enabled is None,
                redirect=first_enabled,
            )
        )
        definitions.extend(children)

    return SourceCatalog.from_definitions(definitions, columns, fixed_columns)


def _parse_definition(
    source_id: str, raw: dict[str, Any], parent: dict[str, Any]
) -> SourceDefinition:
    def pick(key: str) -> Any:
        value = raw.get(key)
        return parent.get(key) if value is None else value

    name_value = pick("name")
    name = name_value.strip() if isinstance(name_value, str) else source_id

    title_value = raw.get("title")
    title = title_value.strip() if isinstance(title_value, str) else None

    kind_value = pick("type")
    kind = SourceKind(kind_value) if kind_value in ("hottest", "realtime") else None

    interval_value = pick("interval")
    interval_ms = (
        interval_value
        if isinstance(interval_value, int) and interval_value > 0
        else settings.SOURCE_DEFAULT_INTERVAL_MS
    )

    column_value = pick("column")
    home_value = pick("home")
    color_value = pick("color")
    redirect_value = raw.get("redirect")

    return SourceDefinition(
        id=source_id,
        name=name,
        title=title,
        column=column_value if isinstance(column_value, str) else None,
        kind=kind,
        interval_ms=interval_ms,
        home=home_value if isinstance(home_value, str) else None,
        color=color_value if isinstance(color_value, str) else None,
        disable=pick("disable") is True,
        redirect=redirect_value if isinstance(redirect_value, str) else None,
    )
