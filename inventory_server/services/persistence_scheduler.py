"""Debounced snapshot writes.

Mutations call ``schedule_flush()`` as often as they like. The first call in a
tick registers one callback with ``loop.call_soon``; later calls in the same
tick are absorbed. The snapshot is taken when the callback runs, so the single
write reflects every mutation made before it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from inventory_server.exceptions import PersistenceError
from inventory_server.persistence.protocols import DataStoreProtocol
from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class PersistenceScheduler:
    """Single-slot debounce in front of a data store. Sole writer of the store."""

    def __init__(self, data_store: DataStoreProtocol, snapshot_provider: Callable[[], dict[str, Any]]) -> None:
        self._data_store = data_store
        self._snapshot_provider = snapshot_provider
        self._pending_handle: asyncio.Handle | None = None
        self.flush_count = 0

    @property
    def flush_pending(self) -> bool:
        return self._pending_handle is not None

    def schedule_flush(self) -> None:
        """Request a write on the next loop tick. No-op while one is pending."""
        if self._pending_handle is not None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Startup and sync callers have no loop to defer to.
            logger.debug("No running event loop, flushing inline")
            self._write_snapshot()
            return

        self._pending_handle = loop.call_soon(self._run_deferred_flush)

    def _run_deferred_flush(self) -> None:
        self._pending_handle = None
        try:
            self._write_snapshot()
        except (PersistenceError, OSError, TypeError, ValueError) as e:
            # Raised inside a loop callback there is no caller to report to.
            logger.error("Deferred item data flush failed", error=str(e), error_type=type(e).__name__)

    def flush_now(self) -> None:
        """Write immediately, cancelling any pending deferred write. Errors propagate."""
        if self._pending_handle is not None:
            self._pending_handle.cancel()
            self._pending_handle = None
        self._write_snapshot()

    def _write_snapshot(self) -> None:
        snapshot = self._snapshot_provider()
        self._data_store.store_data(snapshot)
        self.flush_count += 1
        logger.debug("Item data flushed", flush_count=self.flush_count)
