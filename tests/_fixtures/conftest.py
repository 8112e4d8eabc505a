from dataclasses import replace

import pytest

from src.data_collector.config import CollectorConfig
from src.data_collector.alpha_vantage.checkpoint import Checkpoint
from src.data_collector.alpha_vantage.data_storage import PriceStorage
from src.data_collector.alpha_vantage.rate_limiter import BatchPacer
from tests._fixtures.factories import set_factory_seed
from tests._fixtures.remote_api_responses import FakeFetcher

TEST_API_KEY = "ABCDEFGH12345678"


# Central deterministic seed fixture for all tests (Polyfactory + random)
@pytest.fixture(scope="session", autouse=True)
def factory_seed():
    """
    Set a single deterministic seed for factory-generated data.

    Runs once per test session and returns the seed value used (42).
    """
    seed = 42
    set_factory_seed(seed)
    return seed


@pytest.fixture
def collector_config(tmp_path):
    """CollectorConfig pointing every file at the test's tmp directory."""
    return replace(
        CollectorConfig(),
        DB_PATH=str(tmp_path / "crypto.sqlite"),
        API_KEY_FILE=str(tmp_path / "apikey.txt"),
        SYMBOL_LIST_FILE=str(tmp_path / "digital_currency_list.csv"),
        CHECKPOINT_PATH=str(tmp_path / "index.txt"),
        BATCH_SIZE=5,
        PACING_SECONDS=60.0,
        LIMIT_BACKOFF_SECONDS=86400,
        PRODUCTION=False,
        WEEKS=3,
    )


@pytest.fixture
def write_symbol_list(collector_config):
    """Write a symbol list (header row first) and return the codes written."""

    def _write(codes):
        lines = ["currency code,currency name"]
        lines += [f"{code},{code} coin" for code in codes]
        with open(collector_config.SYMBOL_LIST_FILE, "w", encoding="utf-8") as fh:
            fh.write("\n".join(lines) + "\n")
        return list(codes)

    return _write


@pytest.fixture
def price_storage(collector_config):
    """A PriceStorage on a fresh SQLite file with the schema created."""
    storage = PriceStorage(collector_config.DB_PATH)
    storage.setup_database()
    yield storage
    storage.close()


@pytest.fixture
def checkpoint(collector_config):
    return Checkpoint(collector_config.CHECKPOINT_PATH)


@pytest.fixture
def make_pipeline(collector_config, price_storage, checkpoint):
    """Factory building a pipeline wired to fakes and the tmp files."""

    def _make(pipeline_cls, fetcher=None, **config_overrides):
        run_config = replace(collector_config, **config_overrides)
        pacer = BatchPacer(batch_size=run_config.BATCH_SIZE, interval_seconds=run_config.PACING_SECONDS)
        return pipeline_cls(
            run_config,
            fetcher=fetcher or FakeFetcher(),
            api_key=TEST_API_KEY,
            storage=price_storage,
            checkpoint=checkpoint,
            pacer=pacer,
        )

    return _make
