"""
Log storage module for validated component log entries.

This module provides the append-only LogStore abstraction, its in-memory
implementation, and the record types that are stored in it.
"""

from storage.models import Component, LogEntry
from storage.store import LogStore
from storage.memory_store import InMemoryLogStore

__all__ = ["Component", "LogEntry", "LogStore", "InMemoryLogStore"]
