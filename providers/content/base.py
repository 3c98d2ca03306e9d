"""
Content provider abstract base class.

A content provider is the capability the mixer consumes: given a user key
and a count it returns up to ``count`` items, or raises a ProviderError.
Returning fewer items than requested is valid and not an error.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from providers.base import BaseProvider


@dataclass
class ContentItem:
    source: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in self.payload.items() if k != "source"}
        return {"source": self.source, **data}


class ContentProvider(BaseProvider):
    """Abstract base class for content sources (sample generator, HTTP feed, etc.)."""

    @abstractmethod
    def fetch(self, user_key: str, count: int) -> List[ContentItem]:
        """Return at most ``count`` items for ``user_key``.

        Raises:
            ProviderError: the source could not serve this call at all.
        """
        pass

    def validate_count(self, count: int) -> None:
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError(f"Count must be int, got {type(count).__name__}")
        if count < 0:
            raise ValueError("Count cannot be negative")

    def is_available(self) -> bool:
        return self.get_info().get("status", "inactive") == "active"

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.get_config("name", self.__class__.__name__),
            "status": "active",
            "available": True,
        }


__all__ = [
    "ContentItem",
    "ContentProvider",
]
