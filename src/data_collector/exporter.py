"""
Export stored weekly prices to a JSON document grouped by symbol
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from src.data_collector.alpha_vantage.data_storage import PriceStorage
from src.utils.core.logger import get_logger

logger = get_logger(__name__, utility="data_collector")

CATEGORY = "crypto"
MODE = "year.week"


class ExportError(Exception):
    """Raised when stored rows cannot be turned into the export document"""


def to_year_week(timestamps: pd.Series) -> pd.Series:
    """Format ISO dates as ``YYYY.WW`` using the ISO year and ISO week"""
    try:
        parsed = pd.to_datetime(timestamps, format="%Y-%m-%d")
    except (ValueError, TypeError) as e:
        raise ExportError(f"Invalid timestamp in stored prices: {e}") from e

    iso = parsed.dt.isocalendar()
    return iso["year"].astype(str) + "." + iso["week"].astype(int).map("{:02d}".format)


def build_export(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Group ``(symbol, timestamp, value)`` rows into one entry per symbol"""
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=["symbol", "timestamp", "value"])
    df["year_week"] = to_year_week(df["timestamp"])
    df = df.sort_values(["symbol", "timestamp"])

    export = []
    for symbol, group in df.groupby("symbol", sort=True):
        export.append(
            {
                "code": symbol,
                "prices": [
                    {"year.week": year_week, "value": float(value)}
                    for year_week, value in zip(group["year_week"], group["value"])
                ],
                "category": CATEGORY,
                "mode": MODE,
            }
        )
    return export


def export_to_json(db_path: Union[str, Path], output_path: Union[str, Path]) -> int:
    """
    Write every stored price of ``db_path`` to ``output_path``

    Returns:
        Number of symbols exported
    """
    with PriceStorage(db_path) as storage:
        storage.setup_database()
        rows = storage.fetch_prices()

    export = build_export(rows)
    try:
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(export, fh, indent=4)
    except OSError as e:
        raise ExportError(f"Unable to write export file {output_path}: {e}") from e

    logger.info(f"Exported {len(rows)} prices for {len(export)} symbols to {output_path}")
    return len(export)
