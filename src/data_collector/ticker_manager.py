"""
Symbol list loading for the weekly price collector
"""

from pathlib import Path
from typing import List, NamedTuple, Union

import pandas as pd

from src.utils.core.logger import get_logger

logger = get_logger(__name__, utility="data_collector")


class SymbolListError(Exception):
    """Raised when the symbol list file is missing or cannot be parsed"""


class SymbolRow(NamedTuple):
    code: str
    name: str


class TickerManager:
    """
    Reads the ordered list of ``(code, name)`` rows

    Row 0 is the header of the file and is kept, so that row positions match
    the checkpoint index.
    """

    def __init__(self, symbol_list_path: Union[str, Path]):
        self.symbol_list_path = Path(symbol_list_path)

    def load_symbols(self) -> List[SymbolRow]:
        """
        Load every row of the symbol list, header included

        Raises:
            SymbolListError: file missing, unreadable or not two columns wide
        """
        try:
            df = pd.read_csv(
                self.symbol_list_path,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except FileNotFoundError as e:
            raise SymbolListError(f"Symbol list file not found: {self.symbol_list_path}") from e
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise SymbolListError(
                f"Error while processing the symbol list file {self.symbol_list_path}: {e}"
            ) from e

        if df.shape[1] != 2:
            raise SymbolListError(
                f"Symbol list must have 2 columns (code, name), found {df.shape[1]}"
            )

        df = df.fillna("")
        rows = [
            SymbolRow(str(code).strip(), str(name).strip())
            for code, name in df.itertuples(index=False)
        ]
        logger.info(f"Loaded {len(rows) - 1} symbols from {self.symbol_list_path}")
        return rows
