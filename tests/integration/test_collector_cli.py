"""End-to-end runs of the command-line runner against a fake HTTP layer."""

import json

import pytest

from src.data_collector.alpha_vantage.data_storage import PriceStorage
from src.main_pipeline_runner import main
from tests._fixtures.remote_api_responses import (
    INVALID_SYMBOL_PAYLOAD,
    LIMIT_PAYLOAD,
    FakeResponse,
    weekly_payload,
)

API_KEY = "ABCDEFGH12345678"
SYMBOLS = ["BTC", "ETH", "NOPE", "LTC", "XRP", "ADA", "DOT"]


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "apikey.txt").write_text(API_KEY + "\n")
    lines = ["currency code,currency name"] + [f"{code},{code} coin" for code in SYMBOLS]
    (tmp_path / "list.csv").write_text("\n".join(lines) + "\n")
    return tmp_path


def _collector_args(workspace, *extra):
    return [
        "collector",
        "--db-name",
        str(workspace / "crypto.sqlite"),
        "--api-key-file",
        str(workspace / "apikey.txt"),
        "--currency-list-file",
        str(workspace / "list.csv"),
        "--index-path",
        str(workspace / "index.txt"),
        *extra,
    ]


def _serve(mocker, overrides=None):
    """Patch requests so each symbol gets its canned body; returns the requested symbols."""
    overrides = overrides or {}
    requested = []

    def fake_get(self, url, timeout=None):
        symbol = url.split("symbol=")[1].split("&")[0]
        requested.append(symbol)
        body = overrides.get(symbol, weekly_payload())
        if isinstance(body, list):
            body = body.pop(0) if len(body) > 1 else body[0]
        return FakeResponse(content=body)

    mocker.patch("requests.Session.get", fake_get)
    return requested


def _stored(workspace):
    with PriceStorage(workspace / "crypto.sqlite") as storage:
        return storage.fetch_prices(), storage.get_blacklisted_symbols()


@pytest.mark.integration
@pytest.mark.parametrize("mode", [[], ["--concurrent"]])
def test_collect_then_export(workspace, mocker, mode):
    requested = _serve(mocker, {"NOPE": INVALID_SYMBOL_PAYLOAD})

    assert main(_collector_args(workspace, *mode)) == 0

    assert sorted(requested) == sorted(SYMBOLS)
    rows, blacklist = _stored(workspace)
    assert blacklist == {"NOPE"}
    # The sample series holds 6 of the 25 requested weeks
    assert len(rows) == 6 * 6
    assert (workspace / "index.txt").read_text() == "0"

    output = workspace / "prices.json"
    assert main(["exporter", "--db-name", str(workspace / "crypto.sqlite"), "--json", str(output)]) == 0
    document = json.loads(output.read_text())
    assert [entry["code"] for entry in document] == sorted(set(SYMBOLS) - {"NOPE"})
    assert document[0]["prices"][-1] == {"year.week": "2023.24", "value": 24011.516652}


@pytest.mark.integration
def test_limit_then_resume_matches_single_pass(workspace, mocker):
    """A run cut short by the daily limit and resumed stores what one full pass would."""
    _serve(mocker, {"LTC": LIMIT_PAYLOAD})
    assert main(_collector_args(workspace)) == 0
    assert (workspace / "index.txt").read_text() == "4"

    requested = _serve(mocker)
    assert main(_collector_args(workspace)) == 0
    assert requested == ["LTC", "XRP", "ADA", "DOT"]

    rows, _ = _stored(workspace)
    assert len(rows) == 6 * 6
    assert len({(row["symbol"], row["timestamp"]) for row in rows}) == len(rows)


@pytest.mark.integration
def test_clear_blacklist_flag(workspace, mocker):
    _serve(mocker, {"NOPE": INVALID_SYMBOL_PAYLOAD})
    assert main(_collector_args(workspace)) == 0

    requested = _serve(mocker, {"NOPE": INVALID_SYMBOL_PAYLOAD})
    assert main(_collector_args(workspace, "--clear-blacklist")) == 0

    assert "NOPE" in requested
    _, blacklist = _stored(workspace)
    assert blacklist == {"NOPE"}


@pytest.mark.integration
def test_bad_api_key_fails_without_fetching(workspace, mocker):
    (workspace / "apikey.txt").write_text("too-short")
    requested = _serve(mocker)

    assert main(_collector_args(workspace)) == 1
    assert requested == []


@pytest.mark.integration
def test_missing_symbol_list_fails(workspace, mocker):
    (workspace / "list.csv").unlink()
    _serve(mocker)

    assert main(_collector_args(workspace)) == 1


@pytest.mark.integration
def test_invalid_batch_size_is_rejected(workspace):
    assert main(_collector_args(workspace, "--batch-size", "0")) == 1


@pytest.mark.integration
def test_exporter_requires_both_paths():
    with pytest.raises(SystemExit):
        main(["exporter", "--db-name", "crypto.sqlite"])
