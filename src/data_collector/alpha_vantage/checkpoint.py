"""
Durable cursor into the symbol list
"""

import os
from pathlib import Path
from typing import Union

from src.utils.core.logger import get_logger

logger = get_logger(__name__, utility="data_collector")


class CheckpointError(Exception):
    """Raised when the checkpoint file cannot be written"""


class Checkpoint:
    """
    Index of the next unprocessed row, persisted as a plain base-10 integer

    A missing file means "start of list" (index 0).
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def write(self, index: int) -> None:
        """
        Persist ``index``, overwriting the previous value

        The value is written to a sibling temporary file and moved into place,
        so a crash never leaves a truncated checkpoint behind.
        """
        if index < 0:
            raise ValueError(f"Checkpoint index must be non-negative, got {index}")

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(str(index))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise CheckpointError(f"Failed to write index to {self.path}: {e}") from e

    def read(self) -> int:
        """Return the stored index, 0 when the file is absent or unusable"""
        try:
            raw = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            logger.info("No index found, starting from the beginning")
            return 0
        except OSError as e:
            logger.warning(f"Unable to read index from {self.path} ({e}), starting from the beginning")
            return 0

        try:
            index = int(raw)
        except ValueError:
            logger.warning(f"Index file {self.path} holds {raw!r}, starting from the beginning")
            return 0

        if index < 0:
            logger.warning(f"Negative index {index} in {self.path}, starting from the beginning")
            return 0
        return index

    def reset(self) -> None:
        """Point the checkpoint back to the start of the list"""
        self.write(0)
