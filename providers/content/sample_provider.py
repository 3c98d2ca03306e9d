"""
Sample content provider.

Generates synthetic articles locally, so the service can be run and demoed
without any upstream. The optional ``inventory`` config caps how many items
a single call can return, which simulates a source with a small backlog.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from providers.content.base import ContentItem, ContentProvider
from providers.registry import registry

logger = logging.getLogger(__name__)

_WORDS = [
    "market", "weather", "science", "football", "election", "travel",
    "music", "startup", "climate", "health", "space", "culture",
]


class SampleContentProvider(ContentProvider):
    """Random article generator tagged with this provider's id."""

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self.inventory: Optional[int] = self.get_config("inventory")
        self.link_base = self.get_config("link_base", "https://example.com/articles")
        self._rng = random.Random(self.get_config("seed"))

    def fetch(self, user_key: str, count: int) -> List[ContentItem]:
        self.validate_count(count)
        if self.inventory is not None:
            count = min(count, int(self.inventory))
        logger.debug("Sample provider %s generating %d items for %s", self.provider_id, count, user_key)
        return [self._make_item() for _ in range(count)]

    def _make_item(self) -> ContentItem:
        item_id = str(uuid.uuid4())
        words = self._rng.sample(_WORDS, 3)
        expiry = datetime.now(timezone.utc) + timedelta(days=self._rng.randint(1, 14))
        return ContentItem(
            source=self.provider_id,
            payload={
                "id": item_id,
                "title": " ".join(words).title(),
                "summary": f"A short story about {words[0]}, {words[1]} and {words[2]}.",
                "link": f"{self.link_base}/{item_id}",
                "expiry": expiry.isoformat(),
            },
        )

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.get_config("name", f"Sample {self.provider_id}"),
            "status": "active",
            "inventory": self.inventory,
            "available": True,
        }


# Auto-register when this module is imported
registry.register("sample", SampleContentProvider)
