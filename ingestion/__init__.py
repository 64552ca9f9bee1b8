"""
Log ingestion module for component log batches.

This module validates submitted batches of raw log entries against a
strict schema and commits fully valid batches to the log store.
"""

from ingestion.service import (
    BATCH_INVALID_MESSAGE,
    NOT_AN_ARRAY_MESSAGE,
    IngestResult,
    InvalidEntry,
    LogIngestionService,
    ValidationResult,
    validate_batch,
    validate_entry,
)

__all__ = [
    "BATCH_INVALID_MESSAGE",
    "NOT_AN_ARRAY_MESSAGE",
    "IngestResult",
    "InvalidEntry",
    "LogIngestionService",
    "ValidationResult",
    "validate_batch",
    "validate_entry",
]
