"""
Data storage functionality for the SQLite price database
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.data_collector.alpha_vantage.models import CuratedPricePoint
from src.database.connection import dispose_engine, get_engine, transaction
from src.utils.core.logger import get_logger

logger = get_logger(__name__, utility="data_collector")

PRICES_TABLE = "crypto_prices"
BLACKLIST_TABLE = "blacklist"


class StorageError(Exception):
    """Raised when the database cannot be opened, created or written"""


class PriceStorage:
    """
    Handles storage of weekly prices and the symbol blacklist in SQLite

    Price writes are idempotent: a ``(symbol, timestamp)`` pair that is already
    stored is silently ignored.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        prices_table: str = PRICES_TABLE,
        blacklist_table: str = BLACKLIST_TABLE,
    ):
        self.db_path = db_path
        self.prices_table = prices_table
        self.blacklist_table = blacklist_table
        self.engine = get_engine(db_path)

    def setup_database(self) -> None:
        """
        Create the price and blacklist tables if they do not exist yet

        Raises:
            StorageError: if the database file cannot be opened or the schema created
        """
        statements = [
            f"""
            CREATE TABLE IF NOT EXISTS {self.prices_table} (
                id INTEGER PRIMARY KEY,
                symbol TEXT,
                timestamp TEXT,
                value REAL,
                UNIQUE(symbol, timestamp)
            )
            """,
            f"""
            CREATE TABLE IF NOT EXISTS {self.blacklist_table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                symbol VARCHAR(255) UNIQUE NOT NULL
            )
            """,
        ]
        try:
            with transaction(self.engine) as conn:
                for statement in statements:
                    conn.execute(text(statement))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create tables in {self.db_path}: {e}") from e

        logger.info(f"Database ready at {self.db_path}")

    def store_prices(self, points: Iterable[CuratedPricePoint]) -> int:
        """
        Store curated price points in a single transaction

        Args:
            points: Curated points, usually the result of one extraction

        Returns:
            Number of rows actually inserted (already stored weeks count as 0)

        Raises:
            StorageError: if any row fails; nothing from the batch is committed
        """
        rows = [point.to_row() for point in points]
        if not rows:
            logger.warning("No records to store")
            return 0

        insert_sql = text(
            f"INSERT OR IGNORE INTO {self.prices_table} (symbol, timestamp, value) "
            "VALUES (:symbol, :timestamp, :value)"
        )
        inserted = 0
        try:
            with transaction(self.engine) as conn:
                for row in rows:
                    inserted += conn.execute(insert_sql, row).rowcount
        except SQLAlchemyError as e:
            logger.error(f"Storing {len(rows)} price rows failed, batch rolled back: {e}")
            raise StorageError(f"unable to store data in the database: {e}") from e

        logger.info(f"Stored {inserted} new of {len(rows)} price rows")
        return inserted

    def add_to_blacklist(self, symbol: str) -> None:
        """Add (or replace) a symbol in the blacklist"""
        self._execute(
            f"INSERT OR REPLACE INTO {self.blacklist_table} (symbol) VALUES (:symbol)",
            {"symbol": symbol},
        )
        logger.info(f"Blacklisted symbol {symbol}")

    def is_blacklisted(self, symbol: str) -> bool:
        """Check blacklist membership by exact match"""
        count = self._scalar(
            f"SELECT COUNT(*) FROM {self.blacklist_table} WHERE symbol = :symbol",
            {"symbol": symbol},
        )
        return bool(count)

    def get_blacklisted_symbols(self) -> Set[str]:
        rows = self._fetch_all(f"SELECT symbol FROM {self.blacklist_table}")
        return {row["symbol"] for row in rows}

    def clear_blacklist(self) -> None:
        """Remove every symbol from the blacklist"""
        self._execute(f"DELETE FROM {self.blacklist_table}")
        logger.info("Cleared the blacklist table")

    def fetch_prices(self, symbol: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return stored price rows ordered by symbol and timestamp"""
        query = f"SELECT symbol, timestamp, value FROM {self.prices_table}"
        params: Dict[str, Any] = {}
        if symbol is not None:
            query += " WHERE symbol = :symbol"
            params["symbol"] = symbol
        query += " ORDER BY symbol, timestamp"
        return self._fetch_all(query, params)

    def count_prices(self, symbol: Optional[str] = None) -> int:
        query = f"SELECT COUNT(*) FROM {self.prices_table}"
        params: Dict[str, Any] = {}
        if symbol is not None:
            query += " WHERE symbol = :symbol"
            params["symbol"] = symbol
        return int(self._scalar(query, params))

    def close(self) -> None:
        """Release the engine of this database file"""
        dispose_engine(self.db_path)

    def _execute(self, query: str, params: Optional[Dict[str, Any]] = None) -> None:
        try:
            with transaction(self.engine) as conn:
                conn.execute(text(query), params or {})
        except SQLAlchemyError as e:
            raise StorageError(f"Database write failed: {e}") from e

    def _scalar(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            with self.engine.connect() as conn:
                return conn.execute(text(query), params or {}).scalar()
        except SQLAlchemyError as e:
            raise StorageError(f"Database read failed: {e}") from e

    def _fetch_all(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            raise StorageError(f"Database read failed: {e}") from e

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
