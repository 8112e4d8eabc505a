"""
Sequential collection pipeline for Alpha Vantage weekly prices
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from src.utils.core.credentials import load_api_key
from src.utils.core.logger import get_logger
from src.data_collector.config import CollectorConfig, config
from src.data_collector.ticker_manager import SymbolRow, TickerManager
from src.data_collector.alpha_vantage.checkpoint import Checkpoint
from src.data_collector.alpha_vantage.client import CollectorConnectionError, Fetcher, HttpFetcher
from src.data_collector.alpha_vantage.data_storage import PriceStorage
from src.data_collector.alpha_vantage.extractor import (
    ExtractionError,
    ExtractionResult,
    extract_weekly_prices,
)
from src.data_collector.alpha_vantage.rate_limiter import BatchPacer, get_pacer
from src.data_collector.alpha_vantage.response_classifier import ResponseStatus, classify_response

logger = get_logger(__name__, utility="data_collector")


class PipelineStats:
    """Statistics tracking for a collection run"""

    def __init__(self, mode: str = "sequential"):
        self.mode = mode
        self.start_time = datetime.now()
        self.end_time = None
        self.processed = 0
        self.successful = 0
        self.incomplete = 0
        self.failed = 0
        self.blacklisted = 0
        self.skipped_blacklisted = 0
        self.limit_hits = 0
        self.api_calls = 0
        self.total_records_extracted = 0
        self.total_records_stored = 0
        self.stopped_early = False
        self.errors: List[str] = []

    def add_error(self, symbol: str, error: str) -> None:
        self.failed += 1
        self.errors.append(f"{symbol}: {error}")

    def finish(self):
        """Mark run as finished"""
        self.end_time = datetime.now()

    @property
    def duration(self) -> timedelta:
        """Get run duration"""
        end = self.end_time or datetime.now()
        return end - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary"""
        return {
            "mode": self.mode,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_seconds": self.duration.total_seconds(),
            "processed": self.processed,
            "successful": self.successful,
            "incomplete": self.incomplete,
            "failed": self.failed,
            "blacklisted": self.blacklisted,
            "skipped_blacklisted": self.skipped_blacklisted,
            "limit_hits": self.limit_hits,
            "api_calls": self.api_calls,
            "total_records_extracted": self.total_records_extracted,
            "total_records_stored": self.total_records_stored,
            "stopped_early": self.stopped_early,
            "error_count": len(self.errors),
            "errors": self.errors[:10],  # Limit to first 10 errors
        }


@dataclass
class SymbolOutcome:
    """Result of fetching, classifying and extracting one symbol"""

    index: int
    symbol: str
    status: Optional[ResponseStatus] = None
    extraction: Optional[ExtractionResult] = None
    extraction_error: Optional[ExtractionError] = None
    transport_error: Optional[CollectorConnectionError] = None


class CollectorPipeline:
    """
    Sequential collection pipeline

    Drives one symbol at a time through fetch, classification, extraction and
    storage, pacing requests to respect the per-minute quota and persisting a
    checkpoint before each symbol so an interrupted run resumes where it stopped.
    """

    def __init__(
        self,
        collector_config: Optional[CollectorConfig] = None,
        fetcher: Optional[Fetcher] = None,
        api_key: Optional[str] = None,
        storage: Optional[PriceStorage] = None,
        checkpoint: Optional[Checkpoint] = None,
        pacer: Optional[BatchPacer] = None,
        ticker_manager: Optional[TickerManager] = None,
    ):
        """
        Initialize the pipeline

        Args:
            collector_config: Run configuration (defaults to the global config)
            fetcher: Source of raw response bytes (defaults to HTTP)
            api_key: API key (defaults to the key file named in the config)
        """
        self.config = collector_config or config
        self.api_key = api_key if api_key is not None else load_api_key(self.config.API_KEY_FILE)
        self.fetcher = fetcher or HttpFetcher(timeout=self.config.REQUEST_TIMEOUT, api_key=self.api_key)
        self.storage = storage or PriceStorage(self.config.DB_PATH)
        self.checkpoint = checkpoint or Checkpoint(self.config.CHECKPOINT_PATH)
        self.pacer = pacer or get_pacer(self.config)
        self.ticker_manager = ticker_manager or TickerManager(self.config.SYMBOL_LIST_FILE)

        self.stats = PipelineStats()

    def run(self, clear_blacklist: bool = False) -> PipelineStats:
        """
        Process the symbol list from the checkpoint to the end

        Returns:
            Run statistics; ``stats.processed`` counts the symbols fetched

        Raises:
            SymbolListError, StorageError, CheckpointError, CollectorConnectionError
        """
        self.stats = PipelineStats(mode="sequential")
        try:
            rows, start = self._prepare(clear_blacklist)

            for index in range(start, len(rows)):
                self.checkpoint.write(index)

                if index == 0:
                    # First row is a header, not useful
                    continue

                symbol = rows[index].code
                if self.storage.is_blacklisted(symbol):
                    logger.info(f"The symbol {symbol} is blacklisted. Skipping")
                    self.stats.skipped_blacklisted += 1
                    continue

                self.pacer.wait_if_needed()
                self.stats.processed += 1
                logger.info(f"Processing {symbol} ({index}/{len(rows) - 1})")
                self.stats.api_calls += 1
                outcome = self._collect_symbol(index, symbol)

                while outcome.status is ResponseStatus.LIMIT_REACHED:
                    if not self.config.PRODUCTION:
                        logger.info("Reached the limit for today. Finishing...")
                        self.stats.limit_hits += 1
                        self.stats.stopped_early = True
                        return self.stats
                    self._wait_for_quota()
                    self.pacer.wait_if_needed()
                    self.stats.api_calls += 1
                    outcome = self._collect_symbol(index, symbol)

                self._apply_outcome(outcome)

            # Once finished, restart the index.
            self.checkpoint.reset()
            logger.info(f"Collection completed: {self.stats.to_dict()}")
            return self.stats

        except Exception as e:
            logger.error(f"Collection run failed: {e}")
            raise
        finally:
            self.stats.finish()

    def _prepare(self, clear_blacklist: bool) -> Tuple[List[SymbolRow], int]:
        """Load the symbol list, open the store and read the checkpoint"""
        rows = self.ticker_manager.load_symbols()
        self.storage.setup_database()

        if clear_blacklist:
            logger.info("Clearing the blacklist table")
            self.storage.clear_blacklist()

        start = self.checkpoint.read()
        logger.info(f"Starting {self.stats.mode} collection at index {start} of {len(rows)}")
        return rows, start

    def _collect_symbol(self, index: int, symbol: str) -> SymbolOutcome:
        """
        Fetch, classify and extract one symbol without touching the store

        Raises:
            CollectorConnectionError: transport failure
        """
        url = self.config.build_url(symbol, self.api_key)
        response = self.fetcher.fetch(url)

        classified = classify_response(response)
        outcome = SymbolOutcome(index=index, symbol=symbol, status=classified.status)
        if classified.status is ResponseStatus.ALL_GOOD:
            try:
                outcome.extraction = extract_weekly_prices(classified.series, self.config.WEEKS, symbol)
            except ExtractionError as e:
                outcome.extraction_error = e
        return outcome

    def _apply_outcome(self, outcome: SymbolOutcome) -> None:
        """
        Persist the result of one symbol

        Must be called from the orchestrating thread only.

        Raises:
            StorageError: if the prices cannot be stored
        """
        symbol = outcome.symbol

        if outcome.status is ResponseStatus.MISSING_SYMBOL:
            logger.warning(f"Data from symbol {symbol} was not valid. Blacklisting it...")
            self.storage.add_to_blacklist(symbol)
            self.stats.blacklisted += 1
            return

        if outcome.status is not ResponseStatus.ALL_GOOD:
            logger.warning(f"Unusable response for {symbol}: {outcome.status.value}")
            self.stats.add_error(symbol, outcome.status.value)
            return

        if outcome.extraction_error is not None:
            logger.warning(f"Unable to extract data from raw response for {symbol}: {outcome.extraction_error}")
            self.stats.add_error(symbol, str(outcome.extraction_error))
            return

        extraction = outcome.extraction
        if not extraction.complete:
            logger.warning(
                f"For symbol {symbol}, only {extraction.found} of {extraction.requested} "
                "values were extracted as it was incomplete"
            )
            self.stats.incomplete += 1

        stored = self.storage.store_prices(extraction.points)
        self.stats.successful += 1
        self.stats.total_records_extracted += len(extraction.points)
        self.stats.total_records_stored += stored
        logger.info(f"{symbol} done: {len(extraction.points)} weeks extracted, {stored} new")

    def _wait_for_quota(self) -> None:
        """Sleep through the daily quota window, then start a fresh pacing window"""
        self.stats.limit_hits += 1
        hours = self.config.LIMIT_BACKOFF_SECONDS / 3600
        logger.warning(f"Reached the limit for today. We will continue in {hours:.0f} hours")
        time.sleep(self.config.LIMIT_BACKOFF_SECONDS)
        self.pacer.reset()

    def cleanup(self) -> None:
        """Cleanup pipeline resources"""
        close = getattr(self.fetcher, "close", None)
        if callable(close):
            close()
        self.storage.close()
        logger.info("Pipeline cleanup completed")

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.cleanup()
