"""
Request pacing for Alpha Vantage API requests
"""

import time
from dataclasses import dataclass

from src.utils.core.logger import get_logger
from src.data_collector.config import CollectorConfig

logger = get_logger(__name__, utility="data_collector")


@dataclass
class BatchPacer:
    """
    Fixed-window pacer: one pause every ``batch_size`` processed requests

    The pause happens before the first request of every window except the
    first one, so ``p`` processed requests cause ``(p - 1) // batch_size``
    pauses.

    Attributes:
        batch_size: Requests allowed per window
        interval_seconds: Length of the pause between windows
        processed: Requests acquired since creation
        in_window: Requests acquired in the current window
        pauses: Number of pauses taken
    """

    batch_size: int = 5
    interval_seconds: float = 60.0
    processed: int = 0
    in_window: int = 0
    pauses: int = 0

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")

    def wait_if_needed(self, count: int = 1) -> None:
        """
        Account for ``count`` upcoming requests, pausing first if they do not
        fit in the current window

        Sequential callers pass 1 per request; batch callers pass the batch
        length, which is never larger than ``batch_size``.
        """
        if count > self.batch_size:
            raise ValueError(f"Cannot acquire {count} requests with a window of {self.batch_size}")

        if self.in_window > 0 and self.in_window + count > self.batch_size:
            self._pause()
            self.in_window = 0
        self.in_window += count
        self.processed += count

    def _pause(self) -> None:
        logger.info(f"Processed {self.processed} requests, sleeping {self.interval_seconds:.0f}s...")
        time.sleep(self.interval_seconds)
        self.pauses += 1

    def reset(self) -> None:
        """Start a fresh window (used after the daily quota backoff)"""
        self.in_window = 0
        logger.info("Pacer manually reset")

    def __str__(self) -> str:
        return (
            f"BatchPacer(processed: {self.processed}, in_window: {self.in_window}, "
            f"batch_size: {self.batch_size}, pauses: {self.pauses})"
        )


class NoOpPacer(BatchPacer):
    """
    Pacer that counts requests but never sleeps. Used when rate limiting is disabled.
    """

    def _pause(self) -> None:
        return


def get_pacer(config: CollectorConfig) -> BatchPacer:
    """
    Factory to return the appropriate pacer depending on configuration.
    """
    if config.DISABLE_RATE_LIMITING:
        return NoOpPacer(batch_size=config.BATCH_SIZE, interval_seconds=0)
    return BatchPacer(batch_size=config.BATCH_SIZE, interval_seconds=config.PACING_SECONDS)
