"""
pytest fixtures for the content-mix test suite.

The core (pattern, dispatcher, mixer) is tested directly with in-process
providers; endpoint tests build an app around an injected ContentMixer so
each scenario controls exactly which providers succeed or fail.
"""

import os
import sys
import pytest

# Ensure project root is on sys.path so imports work
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(scope="session")
def flask_app():
    """Return an app built from the shipped config (sample providers 1/2/3)."""
    from app import create_app
    return create_app(config_override={"TESTING": True})


@pytest.fixture(scope="session")
def client(flask_app):
    """Return a Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def sample_clients():
    """Healthy sample providers registered as '1', '2' and '3'."""
    from providers.content.sample_provider import SampleContentProvider
    return {pid: SampleContentProvider({"id": pid}) for pid in ("1", "2", "3")}
