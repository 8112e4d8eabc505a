"""
Classification of raw Alpha Vantage responses
"""

from enum import Enum
from typing import NamedTuple, Optional

from pydantic import ValidationError

from src.data_collector.alpha_vantage.models import RawTimeSeries

# Markers are matched on the raw bytes, before any decoding.
INVALID_SYMBOL_MARKER = b"Invalid API call."
LIMIT_REACHED_MARKER = b"You have reached the 100 requests/day limit"


class ResponseStatus(str, Enum):
    """Possible outcomes of a request"""

    ALL_GOOD = "all_good"
    LIMIT_REACHED = "limit_reached"
    MISSING_SYMBOL = "missing_symbol"
    JSON_BROKEN = "json_broken"


class ClassifiedResponse(NamedTuple):
    status: ResponseStatus
    series: Optional[RawTimeSeries] = None


def classify_response(response: bytes) -> ClassifiedResponse:
    """
    Classify the raw bytes of a response.

    Textual markers are checked first, in this order: invalid symbol, then
    daily limit. Only then is the body decoded; a decode failure is
    ``JSON_BROKEN``. The series is returned only for ``ALL_GOOD``.
    """
    if INVALID_SYMBOL_MARKER in response:
        return ClassifiedResponse(ResponseStatus.MISSING_SYMBOL)

    if LIMIT_REACHED_MARKER in response:
        return ClassifiedResponse(ResponseStatus.LIMIT_REACHED)

    try:
        series = RawTimeSeries.model_validate_json(response)
    except ValidationError:
        return ClassifiedResponse(ResponseStatus.JSON_BROKEN)

    return ClassifiedResponse(ResponseStatus.ALL_GOOD, series)
