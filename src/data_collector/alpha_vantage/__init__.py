"""
Alpha Vantage Weekly Price Collection Module

This module collects weekly closing prices of digital currencies from the
Alpha Vantage API with request pacing, blacklisting of unknown symbols,
resumable checkpoints and idempotent SQLite storage.
"""

from .checkpoint import Checkpoint
from .client import HttpFetcher
from ..ticker_manager import TickerManager
from .data_storage import PriceStorage
from .extractor import extract_weekly_prices
from .models import CuratedPricePoint
from .response_classifier import ResponseStatus, classify_response
from .data_pipeline import CollectorPipeline, PipelineStats
from .concurrent_pipeline import ConcurrentCollectorPipeline
from .rate_limiter import BatchPacer

__version__ = "1.0.0"

__all__ = [
    "Checkpoint",
    "HttpFetcher",
    "TickerManager",
    "PriceStorage",
    "extract_weekly_prices",
    "CuratedPricePoint",
    "ResponseStatus",
    "classify_response",
    "CollectorPipeline",
    "ConcurrentCollectorPipeline",
    "PipelineStats",
    "BatchPacer",
]
