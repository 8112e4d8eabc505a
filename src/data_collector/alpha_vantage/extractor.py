"""
Extraction of weekly closing prices from a raw Alpha Vantage series
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List

from pydantic import ValidationError

from src.data_collector.alpha_vantage.models import CuratedPricePoint, RawTimeSeries

DATE_FORMAT = "%Y-%m-%d"


class ExtractionError(Exception):
    """Raised when a series carries an unparseable date or price"""


@dataclass
class ExtractionResult:
    """Points found for one symbol, most recent week first"""

    points: List[CuratedPricePoint] = field(default_factory=list)
    found: int = 0
    requested: int = 0

    @property
    def complete(self) -> bool:
        return self.found == self.requested


def last_sunday(day: date) -> date:
    """Roll a date back to the Sunday that starts its week (Sundays are unchanged)."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def parse_last_refreshed(last_refreshed: str) -> date:
    """Date portion of the "last refreshed" field, e.g. ``2023-06-18 00:00:00``."""
    date_part = last_refreshed.strip().partition(" ")[0]
    try:
        return datetime.strptime(date_part, DATE_FORMAT).date()
    except ValueError as e:
        raise ExtractionError(
            f"unable to get last refreshed date from raw data: {last_refreshed!r}"
        ) from e


def extract_weekly_prices(series: RawTimeSeries, n: int, symbol: str) -> ExtractionResult:
    """
    Walk backward from the last reported week and collect up to ``n`` points.

    Weeks without an entry are counted as missing and skipped. The returned
    ``found`` count equals ``n`` only when every requested week was present.

    Raises:
        ExtractionError: unparseable "last refreshed" date or closing price
    """
    week = last_sunday(parse_last_refreshed(series.last_refreshed))
    result = ExtractionResult(requested=n)

    for _ in range(n):
        key = week.strftime(DATE_FORMAT)
        bar = series.time_series.get(key)
        if bar is not None:
            try:
                value = float(bar.close)
            except ValueError as e:
                raise ExtractionError(
                    f"unable to get the float value for {symbol} on {key}: {bar.close!r}"
                ) from e
            try:
                point = CuratedPricePoint(symbol=symbol, timestamp=week, value=value)
            except ValidationError as e:
                raise ExtractionError(f"invalid price for {symbol} on {key}: {bar.close!r}") from e
            result.points.append(point)
            result.found += 1
        week -= timedelta(days=7)

    return result
