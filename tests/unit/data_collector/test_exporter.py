import json
from datetime import date

import pandas as pd
import pytest

from src.data_collector.alpha_vantage.models import CuratedPricePoint
from src.data_collector.exporter import ExportError, build_export, export_to_json, to_year_week
from tests._fixtures.factories import build_weekly_points


@pytest.mark.unit
def test_export_groups_by_symbol(price_storage, collector_config, tmp_path):
    price_storage.store_prices(build_weekly_points("ETH", weeks=2))
    price_storage.store_prices(build_weekly_points("BTC", weeks=3))
    output = tmp_path / "prices.json"

    exported = export_to_json(collector_config.DB_PATH, output)

    assert exported == 2
    document = json.loads(output.read_text())
    assert [entry["code"] for entry in document] == ["BTC", "ETH"]
    btc = document[0]
    assert btc["category"] == "crypto"
    assert btc["mode"] == "year.week"
    assert [price["year.week"] for price in btc["prices"]] == ["2023.22", "2023.23", "2023.24"]
    assert all(price["value"] > 0 for price in btc["prices"])


@pytest.mark.unit
def test_export_is_indented_with_four_spaces(price_storage, collector_config, tmp_path):
    price_storage.store_prices(build_weekly_points("BTC", weeks=1))
    output = tmp_path / "prices.json"

    export_to_json(collector_config.DB_PATH, output)

    assert output.read_text().startswith('[\n    {\n        "code": "BTC"')


@pytest.mark.unit
def test_empty_database_exports_empty_list(collector_config, tmp_path):
    output = tmp_path / "prices.json"

    assert export_to_json(collector_config.DB_PATH, output) == 0
    assert json.loads(output.read_text()) == []


@pytest.mark.unit
@pytest.mark.parametrize(
    "day, expected",
    [
        ("2023-06-18", "2023.24"),
        ("2023-01-01", "2022.52"),  # Sunday belongs to the last ISO week of 2022
        ("2020-12-27", "2020.52"),
        ("2021-01-03", "2020.53"),
        ("2024-03-03", "2024.09"),
    ],
)
def test_year_week_uses_iso_calendar(day, expected):
    assert to_year_week(pd.Series([day])).tolist() == [expected]


@pytest.mark.unit
def test_bad_timestamp_raises():
    with pytest.raises(ExportError):
        build_export([{"symbol": "BTC", "timestamp": "18/06/2023", "value": 1.0}])


@pytest.mark.unit
def test_build_export_orders_prices_by_date():
    rows = [
        CuratedPricePoint(symbol="BTC", timestamp=date(2023, 6, 18), value=2.0).to_row(),
        CuratedPricePoint(symbol="BTC", timestamp=date(2023, 6, 4), value=1.0).to_row(),
    ]

    export = build_export(rows)

    assert export[0]["prices"] == [
        {"year.week": "2023.22", "value": 1.0},
        {"year.week": "2023.24", "value": 2.0},
    ]
