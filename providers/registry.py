"""
Content provider registry with singleton pattern and auto-discovery.

Usage:
    from providers.registry import registry

    # Register a provider class under an id
    registry.register('sample', SampleContentProvider)

    # Get a provider instance
    provider = registry.get_provider('sample')

    # Load config/providers.yaml: imports provider modules and registers
    # the configured ids ('1', '2', ...) on top of their provider class
    registry.autodiscover()

    # Read-only id -> instance mapping handed to the mixer
    clients = registry.build_clients()
"""

from __future__ import annotations

import importlib
import logging
import os
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type

import yaml

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


class ProviderRegistry:
    """Singleton registry for content providers.

    Providers are registered with a unique string ID.
    get_provider() returns an instantiated provider with config merged from
    the providers YAML (if loaded) and any explicit config passed at
    register() time. The id itself is always injected as config['id'] so a
    provider knows which source it reports items as.
    """

    _instance: Optional["ProviderRegistry"] = None

    def __init__(self) -> None:
        self._providers: Dict[str, Type] = {}
        # Static config passed at register() time
        self._static_configs: Dict[str, Dict] = {}
        # YAML config loaded by autodiscover()
        self._yaml_config: Optional[Dict] = None

    # ------------------------------------------------------------------
    # Singleton
    # ------------------------------------------------------------------

    @classmethod
    def get_instance(cls) -> "ProviderRegistry":
        if cls._instance is None:
            cls._instance = ProviderRegistry()
        return cls._instance

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        provider_id: str,
        provider_class: Type,
        config: Optional[Dict] = None,
    ) -> None:
        """Register a provider implementation.

        Args:
            provider_id:    Unique string key (e.g. 'sample', '1').
            provider_class: Class (not instance) implementing ContentProvider.
            config:         Optional static config dict merged with YAML config.
        """
        provider_id = str(provider_id)
        self._providers[provider_id] = provider_class
        if config:
            self._static_configs[provider_id] = config
        logger.debug("Registered content provider: %s -> %s", provider_id, provider_class.__name__)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def get_provider(self, provider_id: str) -> Any:
        """Return an instantiated provider.

        Config is merged: static config (register-time) is the base,
        YAML config overrides it.

        Raises:
            ValueError: if the provider_id is not registered.
        """
        provider_id = str(provider_id)
        if provider_id not in self._providers:
            available = list(self._providers.keys())
            raise ValueError(
                f"Unknown content provider: '{provider_id}'. "
                f"Available: {available}"
            )

        provider_class = self._providers[provider_id]
        return provider_class(self._build_config(provider_id))

    def build_clients(self, provider_ids: Optional[List[str]] = None) -> Mapping[str, Any]:
        """Instantiate providers once and return a read-only id -> instance map.

        With no ids given, every registered provider is built.
        """
        ids = provider_ids if provider_ids is not None else self.registered_ids()
        clients = {str(pid): self.get_provider(pid) for pid in ids}
        return MappingProxyType(clients)

    # ------------------------------------------------------------------
    # Auto-discovery
    # ------------------------------------------------------------------

    def autodiscover(self, providers_yaml_path: Optional[str] = None) -> None:
        """Load providers.yaml, import provider modules and register ids.

        The YAML file declares which provider modules to load (their
        module-level register() calls fire on import) and a per-id config
        table. An entry carrying ``uses: <registered id>`` registers a new
        id backed by that provider class, so one implementation can serve
        several sources:

            content:
              modules: [providers.content.sample_provider]
              providers:
                "1": {uses: sample, name: Provider 1}

        If providers_yaml_path is None, defaults to config/providers.yaml
        relative to the project root (detected from this file's location).
        """
        if providers_yaml_path is None:
            providers_yaml_path = self._default_yaml_path()

        path = Path(providers_yaml_path)
        if not path.exists():
            logger.debug("providers.yaml not found at %s, skipping autodiscover", path)
            return

        with open(path) as f:
            self._yaml_config = yaml.safe_load(f) or {}

        logger.info("Loaded providers config from %s", path)

        section = self._yaml_config.get("content", {})
        for module_path in section.get("modules", []):
            try:
                importlib.import_module(module_path)
                logger.debug("Auto-imported provider module: %s", module_path)
            except ImportError as exc:
                logger.warning("Could not import provider module %s: %s", module_path, exc)

        for pid, provider_cfg in (section.get("providers") or {}).items():
            base_id = (provider_cfg or {}).get("uses")
            if base_id is None:
                continue
            base_id = str(base_id)
            if not self.is_registered(base_id):
                logger.warning(
                    "Provider %s uses unknown provider class '%s', skipping", pid, base_id
                )
                continue
            self.register(str(pid), self._providers[base_id])

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------

    def registered_ids(self) -> List[str]:
        """Return list of registered provider IDs."""
        return list(self._providers.keys())

    def is_registered(self, provider_id: str) -> bool:
        return str(provider_id) in self._providers

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_config(self, provider_id: str) -> Dict:
        """Merge static + YAML config for a provider ID."""
        config = dict(self._static_configs.get(provider_id, {}))

        if self._yaml_config:
            section = self._yaml_config.get("content", {})
            yaml_provider_cfg = (section.get("providers") or {}).get(provider_id) or {}
            config.update(yaml_provider_cfg)

        config = _resolve_env_vars(config)
        config["id"] = provider_id
        return config

    def _default_yaml_path(self) -> str:
        """Resolve default config/providers.yaml path from project root."""
        # This file lives at providers/registry.py; project root is one level up.
        project_root = Path(__file__).parent.parent
        return str(project_root / "config" / "providers.yaml")


# ---------------------------------------------------------------------------
# Env-var placeholder resolution
# ---------------------------------------------------------------------------

def _resolve_env_vars(config: Dict) -> Dict:
    """Recursively resolve ${ENV_VAR} placeholders in string config values."""

    def _resolve(value: Any) -> Any:
        if isinstance(value, str):
            def _sub(m: re.Match) -> str:
                return os.environ.get(m.group(1), m.group(0))
            return _PLACEHOLDER.sub(_sub, value)
        if isinstance(value, dict):
            return {k: _resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_resolve(v) for v in value]
        return value

    return _resolve(config)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

registry = ProviderRegistry.get_instance()


__all__ = [
    "ProviderRegistry",
    "registry",
]
