"""
Provider package: abstract base class + registry pattern.

Sub-packages:
  providers.content  - ContentProvider base class + concrete providers
  providers.registry - ProviderRegistry singleton
"""

from providers.base import (
    BaseProvider,
    ProviderError,
    ProviderUnavailableError,
    ContentFetchError,
    ProviderTimeoutError,
)
from providers.registry import (
    ProviderRegistry,
    registry,
)

__all__ = [
    # Base classes
    "BaseProvider",
    "ProviderError",
    "ProviderUnavailableError",
    "ContentFetchError",
    "ProviderTimeoutError",
    # Registry
    "ProviderRegistry",
    "registry",
]
