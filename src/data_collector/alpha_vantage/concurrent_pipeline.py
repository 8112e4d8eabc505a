"""
Concurrent collection pipeline: fetches one batch of symbols in parallel,
waits for the whole batch, then persists the results from the calling thread.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

from src.utils.core.logger import get_logger
from src.data_collector.alpha_vantage.client import CollectorConnectionError
from src.data_collector.alpha_vantage.data_pipeline import (
    CollectorPipeline,
    PipelineStats,
    SymbolOutcome,
)
from src.data_collector.alpha_vantage.response_classifier import ResponseStatus

logger = get_logger(__name__, utility="data_collector")


class ConcurrentCollectorPipeline(CollectorPipeline):
    """
    Batch-parallel variant of :class:`CollectorPipeline`

    Non-blacklisted symbols are grouped into batches of ``BATCH_SIZE``. A batch
    is fetched by the worker pool, and nothing is written to the store until
    every fetch of the batch has returned. The checkpoint holds the index of
    the first symbol of the batch in progress, so an interrupted batch is
    fetched again on the next run.
    """

    def run(self, clear_blacklist: bool = False) -> PipelineStats:
        """
        Process the symbol list from the checkpoint to the end, one batch at a time

        Raises:
            SymbolListError, StorageError, CheckpointError, CollectorConnectionError
        """
        self.stats = PipelineStats(mode="concurrent")
        try:
            rows, start = self._prepare(clear_blacklist)

            # Row 0 is the header
            first = max(start, 1)
            blacklisted = self.storage.get_blacklisted_symbols()
            pending = [(index, rows[index].code) for index in range(first, len(rows))]
            batch_items = [item for item in pending if item[1] not in blacklisted]
            self.stats.skipped_blacklisted = len(pending) - len(batch_items)
            if self.stats.skipped_blacklisted:
                logger.info(f"Skipping {self.stats.skipped_blacklisted} blacklisted symbols")

            batch_size = self.config.BATCH_SIZE
            batches = [batch_items[i : i + batch_size] for i in range(0, len(batch_items), batch_size)]
            logger.info(
                f"Starting concurrent collection of {len(batch_items)} symbols "
                f"in {len(batches)} batches with {batch_size} workers"
            )

            with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="collector") as executor:
                for number, batch in enumerate(batches, start=1):
                    self.checkpoint.write(batch[0][0])
                    logger.info(
                        f"Batch {number}/{len(batches)}: {', '.join(symbol for _, symbol in batch)}"
                    )
                    if not self._process_batch(executor, batch):
                        self.stats.stopped_early = True
                        return self.stats

            # Once finished, restart the index.
            self.checkpoint.reset()
            logger.info(f"Concurrent collection completed: {self.stats.to_dict()}")
            return self.stats

        except Exception as e:
            logger.error(f"Concurrent collection run failed: {e}")
            raise
        finally:
            self.stats.finish()

    def _process_batch(self, executor: ThreadPoolExecutor, batch: List[Tuple[int, str]]) -> bool:
        """
        Fetch one batch and persist its results

        Returns:
            False when the daily limit was hit outside production mode

        Raises:
            CollectorConnectionError: after the usable results of the batch are stored
        """
        self.pacer.wait_if_needed(len(batch))
        self.stats.processed += len(batch)
        outcomes = self._fan_out(executor, batch)

        while True:
            limited = [o for o in outcomes if o.status is ResponseStatus.LIMIT_REACHED]
            failures = [o for o in outcomes if o.transport_error is not None]

            for outcome in outcomes:
                if outcome.transport_error is None and outcome.status is not ResponseStatus.LIMIT_REACHED:
                    self._apply_outcome(outcome)

            if failures:
                raise failures[0].transport_error

            if not limited:
                return True

            if not self.config.PRODUCTION:
                logger.info("Reached the limit for today. Finishing...")
                self.stats.limit_hits += 1
                return False

            self._wait_for_quota()
            retry = [(o.index, o.symbol) for o in limited]
            logger.info(f"Retrying {len(retry)} symbols after the daily limit")
            self.pacer.wait_if_needed(len(retry))
            outcomes = self._fan_out(executor, retry)

    def _fan_out(self, executor: ThreadPoolExecutor, batch: List[Tuple[int, str]]) -> List[SymbolOutcome]:
        """Submit every item of the batch and wait for all of them, in submission order"""
        self.stats.api_calls += len(batch)
        futures = [executor.submit(self._collect_symbol_safely, index, symbol) for index, symbol in batch]
        return [future.result() for future in futures]

    def _collect_symbol_safely(self, index: int, symbol: str) -> SymbolOutcome:
        """Worker entry point: transport failures are returned, not raised"""
        thread_id = threading.current_thread().ident
        logger.debug(f"Thread {thread_id}: Processing symbol {symbol}")
        try:
            return self._collect_symbol(index, symbol)
        except CollectorConnectionError as e:
            logger.error(f"Thread {thread_id}: Failed to fetch {symbol}: {e}")
            return SymbolOutcome(index=index, symbol=symbol, transport_error=e)
