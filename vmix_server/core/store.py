"""
In-memory row store

Holds the most recent import batch and the selected row. One instance is
created per serving process and shared through ``app.state.store``; nothing
is persisted.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from vmix_server.errors import NoSelection, NotFound
from vmix_server.models import Row, StoreInfo


logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RowStore:
    """
    Current rows plus an optional selection

    Every operation runs under one lock: sync endpoints execute on a thread
    pool, and the selection must always reference a row of the current batch.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: List[Row] = []
        self._selected_id: Optional[str] = None
        self._filename: Optional[str] = None
        self._last_updated = _now()

    def import_rows(self, rows: Sequence[Row], filename: str) -> None:
        """Replace all rows with a new batch and clear the selection"""
        with self._lock:
            self._rows = list(rows)
            self._selected_id = None
            self._filename = filename
            self._last_updated = _now()
        logger.info(f"💾 Store updated: {len(rows)} rows imported from {filename}")

    def list_rows(self) -> List[Row]:
        with self._lock:
            return list(self._rows)

    def select(self, row_id: str) -> Row:
        """
        Mark a row as selected

        Raises:
            NotFound: no row has this id (current selection is kept)
        """
        with self._lock:
            row = self._find(row_id)
            if row is None:
                raise NotFound(row_id)
            self._selected_id = row.id
        logger.info(f"✅ Row selected: {row_id}")
        return row

    def get_selected(self) -> Row:
        """
        Raises:
            NoSelection: nothing selected since the last import or reset
        """
        with self._lock:
            row = self._find(self._selected_id) if self._selected_id else None
        if row is None:
            raise NoSelection()
        return row

    def info(self) -> StoreInfo:
        with self._lock:
            return StoreInfo(
                count=len(self._rows),
                has_selection=self._selected_id is not None,
                last_updated=self._last_updated,
                filename=self._filename,
                columns=self._rows[0].keys() if self._rows else [],
            )

    def reset(self) -> None:
        with self._lock:
            self._rows = []
            self._selected_id = None
            self._filename = None
            self._last_updated = _now()
        logger.info("🔄 Store reset")

    def _find(self, row_id: str) -> Optional[Row]:
        for row in self._rows:
            if row.id == row_id:
                return row
        return None
