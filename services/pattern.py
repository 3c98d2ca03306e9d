"""
Provider pattern: the configured repeating content mix.

A pattern is a tuple of ProviderConfig values, e.g. [A, A, B, C]. For a
request window it is stretched cyclically into the concrete sequence of
configs to fill, and that sequence is collapsed into per-config demand.

    pattern = build_pattern([{"provider": "1", "fallback": "2"}, {"provider": "3"}])
    seq = expand_pattern(pattern, count=5, offset=1)   # [3, 1, 3, 1, 3]
    demand = aggregate_demand(seq)                     # {1: 2, 3: 3}
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple


class ConfigurationError(RuntimeError):
    """The mix configuration cannot serve requests (server-side fault)."""
    pass


@dataclass(frozen=True)
class ProviderConfig:
    provider_id: str
    fallback_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ProviderConfig":
        """Parse one pattern entry: ``{"provider": "1", "fallback": "2"}`` or a bare id."""
        if isinstance(data, (str, int)) and not isinstance(data, bool):
            return cls(str(data))
        if not isinstance(data, dict) or data.get("provider") in (None, ""):
            raise ConfigurationError(f"Invalid pattern entry: {data!r}")
        fallback = data.get("fallback")
        return cls(
            provider_id=str(data["provider"]),
            fallback_id=None if fallback in (None, "") else str(fallback),
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"provider": self.provider_id, "fallback": self.fallback_id}


Pattern = Tuple[ProviderConfig, ...]


def build_pattern(entries: Optional[Iterable[Any]]) -> Pattern:
    """Build a pattern from the ``mix.pattern`` config list.

    An empty or missing list yields an empty pattern; it is rejected when a
    request is expanded, and reported by validate_pattern().
    """
    if entries is None:
        return ()
    if isinstance(entries, (str, bytes, dict)):
        raise ConfigurationError("mix.pattern must be a list of provider entries")
    return tuple(ProviderConfig.from_dict(entry) for entry in entries)


def validate_pattern(pattern: Sequence[ProviderConfig], registered_ids: Iterable[str]) -> List[str]:
    """Return a list of problems that would make requests fail; empty when OK."""
    problems = []
    if not pattern:
        problems.append("The content mix pattern is empty.")
    known = set(registered_ids)
    for config in dict.fromkeys(pattern):
        if config.provider_id not in known:
            problems.append(f"Provider '{config.provider_id}' is not registered.")
        if config.fallback_id is not None and config.fallback_id not in known:
            problems.append(
                f"Fallback provider '{config.fallback_id}' for '{config.provider_id}' is not registered."
            )
    return problems


def expand_pattern(pattern: Sequence[ProviderConfig], count: int, offset: int) -> List[ProviderConfig]:
    """Stretch the pattern cyclically over the window [offset, offset + count).

    [1, 2, 3] stretched over count=8, offset=0 gives [1, 2, 3, 1, 2, 3, 1, 2].
    """
    if not pattern:
        raise ConfigurationError("The app configuration is empty.")
    size = len(pattern)
    start = offset % size
    return [pattern[(start + i) % size] for i in range(count)]


def aggregate_demand(sequence: Iterable[ProviderConfig]) -> Dict[ProviderConfig, int]:
    """How many items each distinct config has to supply."""
    return dict(Counter(sequence))


__all__ = [
    "ConfigurationError",
    "ProviderConfig",
    "Pattern",
    "build_pattern",
    "validate_pattern",
    "expand_pattern",
    "aggregate_demand",
]
