"""
HTTP content provider.

Fetches items from an upstream JSON endpoint:

    GET <url>?user=<user_key>&count=<n>  ->  [{"title": ..., ...}, ...]

Each object becomes a ContentItem attributed to this provider's id. Any
transport error, non-2xx status or unexpected body shape raises
ContentFetchError so the mixer can fall back.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests

from providers.base import ContentFetchError, ProviderUnavailableError
from providers.content.base import ContentItem, ContentProvider
from providers.registry import registry

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 5.0


class HttpContentProvider(ContentProvider):
    """Upstream JSON feed reached over HTTP."""

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self.url = self.get_config("url", "")
        self.timeout = float(self.get_config("timeout", _DEFAULT_TIMEOUT))
        self.headers = dict(self.get_config("headers") or {})
        api_key = str(self.get_config("api_key") or "")
        if api_key and not api_key.startswith("${"):
            self.headers.setdefault("Authorization", f"Bearer {api_key}")

    def fetch(self, user_key: str, count: int) -> List[ContentItem]:
        self.validate_count(count)
        if not self.url:
            raise ProviderUnavailableError(self.provider_id, "No url configured")

        try:
            resp = requests.get(
                self.url,
                params={"user": user_key, "count": count},
                headers=self.headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise ContentFetchError(self.provider_id, f"Request failed: {exc}") from exc
        except ValueError as exc:
            raise ContentFetchError(self.provider_id, f"Invalid JSON: {exc}") from exc

        if isinstance(body, dict):
            body = body.get("items")
        if not isinstance(body, list):
            raise ContentFetchError(self.provider_id, "Expected a JSON list of items")

        items = [
            ContentItem(source=self.provider_id, payload=entry)
            for entry in body[:count]
            if isinstance(entry, dict)
        ]
        if len(items) < count:
            logger.debug("HTTP provider %s returned %d/%d items", self.provider_id, len(items), count)
        return items

    def is_available(self) -> bool:
        return bool(self.url)

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.get_config("name", f"HTTP {self.provider_id}"),
            "status": "active" if self.is_available() else "inactive",
            "url": self.url,
            "available": self.is_available(),
        }


# Auto-register when this module is imported
registry.register("http", HttpContentProvider)
