"""
Database Package

This package provides SQLite connectivity for the collector.
"""

from src.database.connection import (
    get_engine,
    dispose_engine,
    close_all_engines,
    transaction,
    run_in_transaction,
    fetch_scalar,
    check_database_health,
)

__all__ = [
    "get_engine",
    "dispose_engine",
    "close_all_engines",
    "transaction",
    "run_in_transaction",
    "fetch_scalar",
    "check_database_health",
]
