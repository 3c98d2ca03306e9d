"""
Tests for services/dispatcher.py - concurrent fan-out with one fallback hop.
"""

import threading
import time

import pytest

from providers.base import ContentFetchError
from providers.content.base import ContentItem, ContentProvider
from services.dispatcher import FetchDispatcher
from services.pattern import ConfigurationError, ProviderConfig


# ---------------------------------------------------------------------------
# Minimal providers for testing
# ---------------------------------------------------------------------------

class _RecordingProvider(ContentProvider):
    """Returns ``count`` items (or ``limit``) and records each call."""

    def __init__(self, config=None):
        super().__init__(config)
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, user_key, count):
        with self._lock:
            self.calls.append((user_key, count))
        limit = self._config.get("limit")
        n = count if limit is None else min(count, limit)
        return [ContentItem(self.provider_id, {"n": i}) for i in range(n)]


class _FailingProvider(_RecordingProvider):
    def fetch(self, user_key, count):
        super().fetch(user_key, count)
        raise ContentFetchError(self.provider_id, "Unable to fetch the items, sorry")


class _BrokenProvider(_RecordingProvider):
    """Fails with a non-provider exception; still absorbed."""

    def fetch(self, user_key, count):
        raise KeyError("boom")


class _SlowProvider(_RecordingProvider):
    """Blocks until released (or 5s) before answering."""

    def __init__(self, config=None):
        super().__init__(config)
        self.release = threading.Event()

    def fetch(self, user_key, count):
        self.release.wait(5.0)
        return super().fetch(user_key, count)


class _BarrierProvider(_RecordingProvider):
    """Only succeeds if every sibling call is in flight at the same time."""

    def __init__(self, barrier, config=None):
        super().__init__(config)
        self.barrier = barrier

    def fetch(self, user_key, count):
        self.barrier.wait(timeout=2.0)
        return super().fetch(user_key, count)


def _sources(items):
    return [item.source for item in items]


# ---------------------------------------------------------------------------
# Primary path
# ---------------------------------------------------------------------------

def test_each_config_fetches_its_demand():
    clients = {"1": _RecordingProvider({"id": "1"}), "2": _RecordingProvider({"id": "2"})}
    demand = {ProviderConfig("1", "2"): 3, ProviderConfig("2"): 1}

    results = FetchDispatcher(clients).dispatch(demand, "1.2.3.4")

    assert _sources(results[ProviderConfig("1", "2")]) == ["1", "1", "1"]
    assert _sources(results[ProviderConfig("2")]) == ["2"]
    assert clients["1"].calls == [("1.2.3.4", 3)]
    assert clients["2"].calls == [("1.2.3.4", 1)]


def test_same_provider_in_two_configs_is_called_per_config():
    clients = {"1": _RecordingProvider({"id": "1"}), "2": _RecordingProvider({"id": "2"})}
    demand = {ProviderConfig("1", "2"): 2, ProviderConfig("1"): 1}

    FetchDispatcher(clients).dispatch(demand, "u")

    assert sorted(c for _, c in clients["1"].calls) == [1, 2]


def test_short_result_is_kept_as_returned():
    clients = {"1": _RecordingProvider({"id": "1", "limit": 2})}
    results = FetchDispatcher(clients).dispatch({ProviderConfig("1"): 5}, "u")
    assert [item.payload["n"] for item in results[ProviderConfig("1")]] == [0, 1]


def test_empty_demand_returns_empty():
    assert FetchDispatcher({}).dispatch({}, "u") == {}


# ---------------------------------------------------------------------------
# Fallback path
# ---------------------------------------------------------------------------

def test_fallback_used_when_primary_fails():
    clients = {"2": _FailingProvider({"id": "2"}), "3": _RecordingProvider({"id": "3"})}
    config = ProviderConfig("2", "3")

    results = FetchDispatcher(clients).dispatch({config: 2}, "u")

    assert _sources(results[config]) == ["3", "3"]
    assert clients["3"].calls == [("u", 2)]


def test_double_failure_yields_empty_result_set():
    clients = {"2": _FailingProvider({"id": "2"}), "3": _FailingProvider({"id": "3"})}
    config = ProviderConfig("2", "3")

    results = FetchDispatcher(clients).dispatch({config: 2}, "u")

    assert results == {config: []}
    assert len(clients["2"].calls) == 1
    assert len(clients["3"].calls) == 1


def test_no_fallback_yields_empty_result_set():
    clients = {"2": _FailingProvider({"id": "2"}), "3": _RecordingProvider({"id": "3"})}
    results = FetchDispatcher(clients).dispatch({ProviderConfig("2"): 1}, "u")
    assert results == {ProviderConfig("2"): []}
    assert clients["3"].calls == []


def test_self_fallback_tries_twice_then_gives_up():
    clients = {"2": _FailingProvider({"id": "2"})}
    results = FetchDispatcher(clients).dispatch({ProviderConfig("2", "2"): 3}, "u")
    assert results[ProviderConfig("2", "2")] == []
    assert len(clients["2"].calls) == 2


def test_unexpected_exception_is_absorbed():
    clients = {"1": _BrokenProvider({"id": "1"}), "2": _RecordingProvider({"id": "2"})}
    results = FetchDispatcher(clients).dispatch({ProviderConfig("1", "2"): 1}, "u")
    assert _sources(results[ProviderConfig("1", "2")]) == ["2"]


def test_one_failure_does_not_affect_other_configs():
    clients = {"1": _RecordingProvider({"id": "1"}), "2": _FailingProvider({"id": "2"})}
    results = FetchDispatcher(clients).dispatch(
        {ProviderConfig("1"): 2, ProviderConfig("2"): 2}, "u"
    )
    assert _sources(results[ProviderConfig("1")]) == ["1", "1"]
    assert results[ProviderConfig("2")] == []


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

def test_unknown_primary_raises_before_any_call():
    known = _RecordingProvider({"id": "1"})
    with pytest.raises(ConfigurationError, match="'9'"):
        FetchDispatcher({"1": known}).dispatch(
            {ProviderConfig("1"): 1, ProviderConfig("9"): 1}, "u"
        )
    assert known.calls == []


def test_unknown_fallback_raises():
    clients = {"1": _RecordingProvider({"id": "1"})}
    with pytest.raises(ConfigurationError, match="'nope'"):
        FetchDispatcher(clients).dispatch({ProviderConfig("1", "nope"): 1}, "u")


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

def test_configs_are_fetched_concurrently():
    barrier = threading.Barrier(3)
    clients = {pid: _BarrierProvider(barrier, {"id": pid}) for pid in ("1", "2", "3")}
    demand = {ProviderConfig(pid): 1 for pid in clients}

    results = FetchDispatcher(clients).dispatch(demand, "u")

    # A serial dispatcher would break the barrier and every result would be empty
    assert all(len(items) == 1 for items in results.values())


def test_max_workers_still_completes_every_config():
    clients = {pid: _RecordingProvider({"id": pid}) for pid in ("1", "2", "3", "4")}
    demand = {ProviderConfig(pid): 2 for pid in clients}

    results = FetchDispatcher(clients, max_workers=1).dispatch(demand, "u")

    assert {config.provider_id: len(items) for config, items in results.items()} == {
        "1": 2, "2": 2, "3": 2, "4": 2,
    }


def test_dispatch_joins_all_tasks():
    slow = _SlowProvider({"id": "slow"})
    clients = {"slow": slow, "fast": _RecordingProvider({"id": "fast"})}
    timer = threading.Timer(0.2, slow.release.set)
    timer.start()
    try:
        results = FetchDispatcher(clients).dispatch(
            {ProviderConfig("slow"): 1, ProviderConfig("fast"): 1}, "u"
        )
    finally:
        timer.cancel()
    assert _sources(results[ProviderConfig("slow")]) == ["slow"]
    assert _sources(results[ProviderConfig("fast")]) == ["fast"]


# ---------------------------------------------------------------------------
# Per-call deadline
# ---------------------------------------------------------------------------

def test_timeout_triggers_fallback():
    slow = _SlowProvider({"id": "slow"})
    clients = {"slow": slow, "backup": _RecordingProvider({"id": "backup"})}
    config = ProviderConfig("slow", "backup")
    try:
        started = time.monotonic()
        results = FetchDispatcher(clients, call_timeout=0.1).dispatch({config: 2}, "u")
        elapsed = time.monotonic() - started
    finally:
        slow.release.set()

    assert _sources(results[config]) == ["backup", "backup"]
    assert elapsed < 2.0


def test_timeout_without_fallback_yields_empty():
    slow = _SlowProvider({"id": "slow"})
    try:
        results = FetchDispatcher({"slow": slow}, call_timeout=0.1).dispatch(
            {ProviderConfig("slow"): 1}, "u"
        )
    finally:
        slow.release.set()
    assert results == {ProviderConfig("slow"): []}


def test_timeout_leaves_fast_calls_alone():
    clients = {"1": _RecordingProvider({"id": "1"})}
    results = FetchDispatcher(clients, call_timeout=1.0).dispatch({ProviderConfig("1"): 3}, "u")
    assert _sources(results[ProviderConfig("1")]) == ["1", "1", "1"]
