"""
Content mixer: blends items from several providers following the
configured pattern.

For one request window it:
  1. stretches the pattern over [offset, offset + count)
  2. counts how many items each distinct provider config owes
  3. fetches those concurrently (with one fallback hop per config)
  4. walks the stretched sequence and plucks items back into order,
     stopping at the first config that ran dry

Usage:
    from services.mixer import build_mixer
    mixer = build_mixer()
    items = mixer.mix(count=5, offset=0, user_key="203.0.113.7")
"""

from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from config.loader import Config, config
from providers.content.base import ContentItem
from providers.registry import ProviderRegistry, registry
from services.dispatcher import FetchDispatcher
from services.pattern import (
    ConfigurationError,
    ProviderConfig,
    aggregate_demand,
    build_pattern,
    expand_pattern,
    validate_pattern,
)

logger = logging.getLogger(__name__)


class InvalidParameterError(ValueError):
    """A window parameter (count/offset) supplied by the caller is malformed."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(message)


def interleave(
    sequence: Iterable[ProviderConfig],
    results: Mapping[ProviderConfig, Sequence[ContentItem]],
) -> List[ContentItem]:
    """Arrange fetched items in sequence order.

    Each config's items are consumed front to back. The walk stops at the
    first config with nothing left, so the output is always a contiguous
    prefix of the sequence and never has gaps.
    """
    queues = {config: deque(items) for config, items in results.items()}
    output: List[ContentItem] = []
    for config in sequence:
        queue = queues.get(config)
        if not queue:
            break
        output.append(queue.popleft())
    return output


def _check_window_param(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(name, f"'{name}' must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidParameterError(name, f"'{name}' cannot be negative")
    return value


class ContentMixer:
    """Stateless request orchestrator over an immutable pattern + client map."""

    def __init__(
        self,
        pattern: Sequence[ProviderConfig],
        clients: Mapping[str, Any],
        max_workers: Optional[int] = None,
        call_timeout: Optional[float] = None,
        max_count: Optional[int] = None,
    ) -> None:
        self.pattern = tuple(pattern)
        self.max_count = max_count
        self.clients = MappingProxyType(dict(clients))
        self.dispatcher = FetchDispatcher(
            self.clients, max_workers=max_workers, call_timeout=call_timeout
        )

    def validate(self) -> List[str]:
        """Problems that would make every request fail (empty when healthy)."""
        return validate_pattern(self.pattern, self.clients.keys())

    def mix(self, count: int, offset: int, user_key: str = "") -> List[ContentItem]:
        """Return up to ``count`` items for the window starting at ``offset``.

        Raises:
            InvalidParameterError: count/offset is not a non-negative int,
                or count is above max_count.
            ConfigurationError: the pattern is empty or names unknown providers.
        """
        count = _check_window_param("count", count)
        offset = _check_window_param("offset", offset)
        if self.max_count is not None and count > self.max_count:
            raise InvalidParameterError(
                "count",
                f"Please provide the 'count' query parameter as a number no greater than {self.max_count}.",
            )

        sequence = expand_pattern(self.pattern, count, offset)
        if not sequence:
            return []

        demand = aggregate_demand(sequence)
        logger.debug(
            "Demand for offset=%d count=%d: %s",
            offset, count,
            {f"{c.provider_id}->{c.fallback_id}": n for c, n in demand.items()},
        )

        results = self.dispatcher.dispatch(demand, user_key)
        items = interleave(sequence, results)
        if len(items) < count:
            logger.info("Mix truncated to %d/%d items (offset=%d)", len(items), count, offset)
        else:
            logger.info("Mixed %d items (offset=%d)", len(items), offset)
        return items


def build_mixer(cfg: Optional[Config] = None, reg: Optional[ProviderRegistry] = None) -> ContentMixer:
    """Build a mixer from config: discover providers, parse the pattern."""
    import providers.content  # noqa: F401  (registers built-in provider classes)

    cfg = cfg or config
    reg = reg or registry
    reg.autodiscover(cfg.get("providers.yaml_path"))

    pattern = build_pattern(cfg.get("mix.pattern"))
    return ContentMixer(
        pattern,
        reg.build_clients(),
        max_workers=cfg.get("mix.max_workers"),
        call_timeout=cfg.get("mix.call_timeout"),
        max_count=cfg.get("mix.max_count"),
    )


__all__ = [
    "ConfigurationError",
    "InvalidParameterError",
    "ContentMixer",
    "interleave",
    "build_mixer",
]
