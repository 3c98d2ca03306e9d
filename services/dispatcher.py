"""
Concurrent fetch fan-out with a single fallback hop.

One task per distinct provider config runs on a thread pool. Each task
calls its primary provider, and on failure its fallback once; a config
whose calls all fail gets an empty result set. Provider failures never
leave this module. dispatch() joins every task before returning.

An optional per-call deadline (call_timeout) runs each provider call on a
helper pool; expiry counts as a provider failure.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Dict, List, Mapping, Optional

from providers.base import ProviderTimeoutError
from providers.content.base import ContentItem
from services.pattern import ConfigurationError, ProviderConfig

logger = logging.getLogger(__name__)

ResultSets = Dict[ProviderConfig, List[ContentItem]]


class FetchDispatcher:
    """Fetches each config's demand concurrently from a read-only client map."""

    def __init__(
        self,
        clients: Mapping[str, Any],
        max_workers: Optional[int] = None,
        call_timeout: Optional[float] = None,
    ) -> None:
        self._clients = clients
        self.max_workers = max_workers
        self.call_timeout = call_timeout

    def dispatch(self, demand: Mapping[ProviderConfig, int], user_key: str) -> ResultSets:
        """Return {config: items} for every config in demand.

        Raises:
            ConfigurationError: a config names a provider that isn't registered.
        """
        if not demand:
            return {}
        self._check_registered(demand)

        workers = len(demand)
        if self.max_workers:
            workers = min(workers, int(self.max_workers))

        call_pool = None
        if self.call_timeout is not None:
            # A timed-out primary keeps its thread, so leave room for the fallback
            call_pool = ThreadPoolExecutor(
                max_workers=2 * len(demand), thread_name_prefix="content-call"
            )
        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="content-mix") as pool:
                futures: Dict[ProviderConfig, Future] = {
                    config: pool.submit(self._fetch_for_config, config, amount, user_key, call_pool)
                    for config, amount in demand.items()
                }
                return {config: future.result() for config, future in futures.items()}
        finally:
            if call_pool is not None:
                call_pool.shutdown(wait=False, cancel_futures=True)

    def _fetch_for_config(
        self,
        config: ProviderConfig,
        amount: int,
        user_key: str,
        call_pool: Optional[ThreadPoolExecutor],
    ) -> List[ContentItem]:
        try:
            return self._call(config.provider_id, user_key, amount, call_pool)
        except Exception as exc:
            logger.warning("Provider %s failed to fetch %d items: %s", config.provider_id, amount, exc)

        if config.fallback_id is None:
            return []

        logger.info("Falling back from provider %s to %s", config.provider_id, config.fallback_id)
        try:
            return self._call(config.fallback_id, user_key, amount, call_pool)
        except Exception as exc:
            logger.warning(
                "Fallback provider %s failed to fetch %d items: %s", config.fallback_id, amount, exc
            )
            return []

    def _call(
        self,
        provider_id: str,
        user_key: str,
        amount: int,
        call_pool: Optional[ThreadPoolExecutor],
    ) -> List[ContentItem]:
        provider = self._clients[provider_id]
        if call_pool is None:
            return list(provider.fetch(user_key, amount) or [])

        future = call_pool.submit(provider.fetch, user_key, amount)
        try:
            items = future.result(timeout=self.call_timeout)
        except FutureTimeoutError:
            future.cancel()
            raise ProviderTimeoutError(provider_id, f"No response within {self.call_timeout}s")
        return list(items or [])

    def _check_registered(self, demand: Mapping[ProviderConfig, int]) -> None:
        for config in demand:
            for provider_id in (config.provider_id, config.fallback_id):
                if provider_id is not None and provider_id not in self._clients:
                    raise ConfigurationError(f"Provider '{provider_id}' is not registered.")


__all__ = ["FetchDispatcher", "ResultSets"]
