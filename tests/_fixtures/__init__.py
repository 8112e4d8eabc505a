"""Fixtures package for tests.

Re-export commonly used fakes and payload builders for convenient imports
from `tests._fixtures` package.
"""

from .remote_api_responses import (
    BROKEN_PAYLOAD,
    INVALID_SYMBOL_PAYLOAD,
    LIMIT_PAYLOAD,
    SAMPLE_WEEKLY_CLOSES,
    FakeFetcher,
    FakeResponse,
    canned_api_factory,
    weekly_payload,
)
from .factories import CuratedPricePointFactory, build_weekly_points
from .frozen_time import FrozenClock

__all__ = [
    "BROKEN_PAYLOAD",
    "INVALID_SYMBOL_PAYLOAD",
    "LIMIT_PAYLOAD",
    "SAMPLE_WEEKLY_CLOSES",
    "FakeFetcher",
    "FakeResponse",
    "canned_api_factory",
    "weekly_payload",
    "CuratedPricePointFactory",
    "build_weekly_points",
    "FrozenClock",
]
