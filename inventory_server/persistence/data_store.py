"""Data stores for the persisted snapshot.

``InMemoryDataStore`` keeps the last snapshot in process (tests, throwaway
servers). ``JsonFileDataStore`` writes the snapshot to a single JSON file,
replacing it atomically so a crash mid-write leaves the previous state intact.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

from ..exceptions import PersistenceError
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class InMemoryDataStore:
    """Keeps every stored snapshot in memory."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data = copy.deepcopy(initial) if initial is not None else None
        self.write_count = 0

    def load_data(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data)

    def store_data(self, snapshot: dict[str, Any]) -> None:
        self._data = copy.deepcopy(snapshot)
        self.write_count += 1


class JsonFileDataStore:
    """Stores the snapshot as a JSON document on disk."""

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)

    def load_data(self) -> dict[str, Any] | None:
        if not self.file_path.exists():
            logger.info("No stored item data found, starting empty", file_path=str(self.file_path))
            return None

        try:
            with open(self.file_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(
                f"Error loading stored item data: {self.file_path}",
                details={"file_path": str(self.file_path), "error": str(e)},
            ) from e

        if not isinstance(data, dict):
            raise PersistenceError(
                f"Stored item data must be a JSON object: {self.file_path}",
                details={"file_path": str(self.file_path)},
            )
        return data

    def store_data(self, snapshot: dict[str, Any]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2, default=str)
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            raise PersistenceError(
                f"Error saving item data: {self.file_path}",
                details={"file_path": str(self.file_path), "error": str(e)},
            ) from e
        logger.debug("Item data stored", file_path=str(self.file_path))


def create_data_store(backend: str, data_path: str | Path) -> InMemoryDataStore | JsonFileDataStore:
    """Build the data store named by the persistence configuration."""
    if backend == "memory":
        return InMemoryDataStore()
    if backend == "json":
        return JsonFileDataStore(data_path)
    raise ValueError(f"Unknown persistence backend: {backend}")
