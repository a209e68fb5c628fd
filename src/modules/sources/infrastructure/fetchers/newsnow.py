"""NewsNow-compatible upstream getter implementation."""

from __future__ import annotations

import re
from ipaddress import ip_address
from typing import Any
from urllib.parse import urlparse

import httpx
from loguru import logger

from src.core.config import settings
from src.modules.sources.domain.entities import NewsItem
from src.modules.sources.domain.exceptions import UpstreamFetchError


class NewsNowGetter:
    """Fetch one source's items from a NewsNow-compatible ``/api/s`` endpoint.

    Instances are callables matching ``SourceGetter``: ``await getter(force_fresh)``.
    """

    def __init__(
        self,
        source_id: str,
        *,
        base_url: str | None = None,
        api_path: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.source_id = source_id
        self.base_url = (base_url or settings.NEWSNOW_API_BASE_URL).strip()
        self.api_path = (api_path or settings.NEWSNOW_API_PATH).strip()
        self.timeout_sec = timeout_sec or settings.FETCHER_TIMEOUT_SEC
        self._transport = transport

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.api_path}"

    async def __call__(self, force_fresh: bool) -> list[NewsItem]:
        latest_flag = "1" if force_fresh else "0"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_sec,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    self.api_url,
                    params={"id": self.source_id, "latest": latest_flag},
                    headers={
                        "User-Agent": settings.FETCHER_USER_AGENT,
                        "Accept": "application/json",
                    },
                )
                response.raise_for_status()
                payload = response.json()
            return self._parse_payload(payload)
        except httpx.TimeoutException as exc:
            logger.warning(f"NewsNow fetch timeout for {self.source_id}: {exc}")
            raise UpstreamFetchError(self.source_id, f"Timeout: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                f"NewsNow fetch HTTP error for {self.source_id}: {exc.response.status_code}"
            )
            raise UpstreamFetchError(
                self.source_id, f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            logger.warning(f"NewsNow fetch error for {self.source_id}: {exc}")
            raise UpstreamFetchError(self.source_id, f"Error: {exc}") from exc

    def _parse_payload(self, payload: Any) -> list[NewsItem]:
        if not isinstance(payload, dict):
            raise ValueError("NewsNow response payload must be an object")

        status = payload.get("status")
        if status not in ("success", "cache"):
            message = payload.get("message")
            if isinstance(message, str) and message:
                raise ValueError(f"NewsNow API error: {message}")
            raise ValueError("NewsNow API returned non-success status")

        items_raw = payload.get("items")
        if not isinstance(items_raw, list):
            raise ValueError("NewsNow API response missing items list")

        parsed_items: list[NewsItem] = []
        seen_urls: set[str] = set()
        for raw_item in items_raw:
            if not isinstance(raw_item, dict):
                continue

            url_value = raw_item.get("url")
            title_value = raw_item.get("title")
            if not isinstance(url_value, str) or not isinstance(title_value, str):
                continue

            url = url_value.strip()
            if not url or not self._is_allowed_url(url):
                continue
            if url in seen_urls:
                continue
            seen_urls.add(url)

            title = self._clean_text(title_value)
            if not title:
                continue

            item_id = raw_item.get("id")
            if not isinstance(item_id, (str, int)) or isinstance(item_id, bool):
                item_id = url

            mobile_url = raw_item.get("mobileUrl")
            pub_date = raw_item.get("pubDate")
            extra = raw_item.get("extra")

            parsed_items.append(
                NewsItem(
                    id=item_id,
                    title=title,
                    url=url,
                    mobile_url=mobile_url if isinstance(mobile_url, str) else None,
                    pub_date=(
                        pub_date
                        if isinstance(pub_date, (int, float, str))
                        and not isinstance(pub_date, bool)
                        else None
                    ),
                    extra=extra if isinstance(extra, dict) else None,
                )
            )
        return parsed_items

    @staticmethod
    def _clean_text(value: str) -> str:
        cleaned = re.sub(r"<[^>]+>", "", value)
        return " ".join(cleaned.split())

    @staticmethod
    def _is_allowed_url(url: str) -> bool:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return False
        host = parsed.hostname
        if not host:
            return False
        if host in {"localhost"}:
            return False
        if host.endswith((".local", ".internal")):
            return False
        try:
            ip_value = ip_address(host)
        except ValueError:
            return True
        if (
            ip_value.is_private
            or ip_value.is_loopback
            or ip_value.is_link_local
            or ip_value.is_reserved
            or ip_value.is_multicast
        ):
            return False
        return True
