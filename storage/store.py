"""
Log store abstraction.

A log store is an append-only, ordered sequence of LogEntry records. There
is no update or delete operation. One store is created at process start and
handed to every service that reads or writes it.
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

from storage.models import LogEntry


class LogStore(ABC):
    """
    Abstract base class for log store implementations.
    
    Implementations must make append_batch atomic with respect to snapshot:
    a reader sees either none or all of a batch, never part of it.
    """
    
    @abstractmethod
    def append_batch(self, entries: Sequence[LogEntry]) -> int:
        """
        Append a batch of entries in the given order.
        
        Args:
            entries: Validated entries to append
            
        Returns:
            The number of entries appended
        """
        pass
    
    @abstractmethod
    def snapshot(self) -> Tuple[LogEntry, ...]:
        """
        Return a consistent copy of every stored entry, in append order.
        """
        pass
    
    @abstractmethod
    def count(self) -> int:
        """Return the number of stored entries."""
        pass
    
    @abstractmethod
    def health_check(self) -> bool:
        """
        Check that the store is usable.
        
        Returns:
            True if the store can be read, False otherwise.
            
        Note:
            This method should not raise exceptions.
        """
        pass
