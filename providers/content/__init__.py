"""Content provider package.

To add a new content source:
  1. Create providers/content/myprovider_provider.py (inheriting ContentProvider)
  2. Call registry.register('<kind>', MyProvider) at module level
  3. Add the module to content.modules in config/providers.yaml and declare
     the ids that use it under content.providers
"""

from providers.content.base import ContentItem, ContentProvider

# Import concrete providers so their registry.register() calls fire
from providers.content import sample_provider  # noqa: F401
from providers.content import http_provider  # noqa: F401

__all__ = ["ContentItem", "ContentProvider"]
