"""
In-process implementation of the log store.

Entries live for the lifetime of the process; nothing is persisted.
"""

import logging
import threading
from typing import List, Sequence, Tuple

from storage.models import LogEntry
from storage.store import LogStore

logger = logging.getLogger(__name__)


class InMemoryLogStore(LogStore):
    """
    Thread-safe, append-only list of log entries.
    
    FastAPI runs sync endpoints in a worker threadpool, so appends and
    snapshots are serialized with a lock.
    """
    
    def __init__(self):
        self._entries: List[LogEntry] = []
        self._lock = threading.Lock()
    
    def append_batch(self, entries: Sequence[LogEntry]) -> int:
        batch = list(entries)
        with self._lock:
            self._entries.extend(batch)
            total = len(self._entries)
        
        logger.debug(
            f"Appended {len(batch)} log entries",
            extra={"extra_data": {"appended": len(batch), "total": total}}
        )
        return len(batch)
    
    def snapshot(self) -> Tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._entries)
    
    def count(self) -> int:
        with self._lock:
            return len(self._entries)
    
    def health_check(self) -> bool:
        try:
            self.count()
            return True
        except Exception as e:
            logger.warning(f"Log store health check failed: {e}")
            return False
    
    def __len__(self) -> int:
        return self.count()
