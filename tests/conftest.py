import os
import tempfile
import time

import pytest

# Keep test runs from writing into the project's logs folder
os.environ.setdefault("COLLECTOR_LOG_DIR", tempfile.mkdtemp(prefix="collector-logs-"))

# Load shared fixtures from tests._fixtures so pytest discovers them
pytest_plugins = [
    "tests._fixtures.conftest",
    "tests._fixtures.frozen_time",
]


@pytest.fixture(autouse=True)
def no_sleep(mocker):
    """Prevent actual sleeping in tests to speed up pacing/backoff paths."""
    mocker.patch.object(time, "sleep", lambda s: None)


@pytest.fixture(autouse=True)
def block_network(mocker):
    """Autouse fixture: prevent any test from performing real network calls"""
    from tests._fixtures.remote_api_responses import canned_api_factory

    # Default network behavior: patch Session.get to return an empty canned body
    mocker.patch(
        "requests.Session.get",
        return_value=canned_api_factory("empty"),
    )
    yield
