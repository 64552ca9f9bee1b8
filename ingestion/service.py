"""
Validation and ingestion of component log batches.

Each raw entry is checked against three independent rules (timestamp,
value, component) and every failing rule is reported, not just the first.
Batches are all-or-nothing: a single invalid entry rejects the whole batch
and nothing is written to the store.
"""

import logging
import time
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from coercion.numeric import is_finite_number, is_positive_integer
from errors.exceptions import invalid_request, validation_error
from observability.service import (
    ObservabilityService,
    get_observability_service,
    trace_operation,
)
from storage.models import Component, LogEntry
from storage.store import LogStore

logger = logging.getLogger(__name__)


NOT_AN_ARRAY_MESSAGE = "Request body must be an array of log entries"
BATCH_INVALID_MESSAGE = "Some entries are invalid"

TIMESTAMP_REASON = "timestamp must be a positive integer"
VALUE_REASON = "value must be a valid finite number"
COMPONENT_REASON = f"component must be one of: {', '.join(Component.names())}"

REASON_SEPARATOR = "; "

_COMPONENT_NAMES = frozenset(Component.names())


class InvalidEntry(BaseModel):
    """
    A rejected entry of a batch.
    
    Attributes:
        index: Position of the entry in the submitted batch
        entry: The entry exactly as submitted
        reasons: Every rule the entry failed
    """
    
    index: int
    entry: Any = None
    reasons: List[str] = Field(default_factory=list)
    
    @property
    def reason(self) -> str:
        """All failing rules joined into one human-readable string."""
        return REASON_SEPARATOR.join(self.reasons)
    
    def to_detail(self) -> dict[str, Any]:
        """Convert to the {index, entry, reason} shape used in error responses."""
        return {"index": self.index, "entry": self.entry, "reason": self.reason}


class ValidationResult(BaseModel):
    """
    Partition of a batch into valid and invalid entries.
    
    Attributes:
        valid: Entries that passed every rule, in submitted order
        invalid: Entries that failed at least one rule
    """
    
    valid: List[LogEntry] = Field(default_factory=list)
    invalid: List[InvalidEntry] = Field(default_factory=list)
    
    @property
    def is_valid(self) -> bool:
        return not self.invalid


class IngestResult(BaseModel):
    """
    Outcome of a committed batch.
    
    Attributes:
        accepted: Number of entries appended to the store
    """
    
    accepted: int
    
    @property
    def message(self) -> str:
        return f"{self.accepted} logs uploaded successfully"


def validate_entry(entry: Any) -> List[str]:
    """
    Check one raw entry against every rule.
    
    Rules are checked independently, so an entry can fail several at once.
    A non-mapping entry has no fields and fails all of them.
    
    Args:
        entry: The raw entry, usually a dict decoded from JSON
        
    Returns:
        Failure reasons in rule order; empty if the entry is valid
    """
    fields: Mapping[str, Any] = entry if isinstance(entry, Mapping) else {}
    reasons = []
    
    if not is_positive_integer(fields.get("timestamp")):
        reasons.append(TIMESTAMP_REASON)
    if not is_finite_number(fields.get("value")):
        reasons.append(VALUE_REASON)
    
    component = fields.get("component")
    if not isinstance(component, str) or component not in _COMPONENT_NAMES:
        reasons.append(COMPONENT_REASON)
    
    return reasons


def validate_batch(entries: Sequence[Any]) -> ValidationResult:
    """
    Partition a batch into valid log entries and rejected entries.
    
    Args:
        entries: Raw entries in submitted order
        
    Returns:
        ValidationResult with typed valid entries and per-entry failures
    """
    result = ValidationResult()
    
    for index, entry in enumerate(entries):
        reasons = validate_entry(entry)
        if reasons:
            result.invalid.append(InvalidEntry(index=index, entry=entry, reasons=reasons))
            continue
        
        result.valid.append(LogEntry(
            timestamp=int(entry["timestamp"]),
            component=Component(entry["component"]),
            value=float(entry["value"]),
        ))
    
    return result


class LogIngestionService:
    """
    Validate-then-commit ingestion of log batches into a log store.
    
    Attributes:
        store: The log store batches are appended to
        observability: Service used for metrics and audit events
    """
    
    def __init__(
        self,
        store: LogStore,
        observability: Optional[ObservabilityService] = None
    ):
        """
        Initialize the LogIngestionService.
        
        Args:
            store: Log store to append committed batches to
            observability: Optional observability service (uses global if not provided)
        """
        self.store = store
        self.observability = observability or get_observability_service()
        self._logger = logging.getLogger(__name__)
    
    def ingest_batch(self, entries: Any) -> IngestResult:
        """
        Validate a batch and append it to the store if every entry is valid.
        
        Args:
            entries: The decoded request body; must be a list
            
        Returns:
            IngestResult with the number of appended entries
            
        Raises:
            AppException: INVALID_REQUEST if entries is not a list,
                VALIDATION_ERROR with per-entry details if any entry is invalid
        """
        if not isinstance(entries, list):
            self._logger.warning(
                "Log upload rejected: body is not an array",
                extra={"extra_data": {"body_type": type(entries).__name__}}
            )
            raise invalid_request(NOT_AN_ARRAY_MESSAGE)
        
        start_time = time.perf_counter()
        with trace_operation(
            self.observability, "ingestion", "ingest_batch",
            {"log.batch_size": len(entries)}
        ) as span:
            result = validate_batch(entries)
            span.set_attribute("log.invalid_count", len(result.invalid))
            if result.is_valid:
                accepted = self.store.append_batch(result.valid)
        
        if not result.is_valid:
            self._logger.warning(
                f"Log upload rejected: {len(result.invalid)} of {len(entries)} entries invalid",
                extra={"extra_data": {
                    "batch_size": len(entries),
                    "invalid_count": len(result.invalid),
                    "invalid_indexes": [item.index for item in result.invalid],
                }}
            )
            self._audit("create_failed", {
                "batch_size": len(entries),
                "invalid_count": len(result.invalid),
            })
            raise validation_error(
                BATCH_INVALID_MESSAGE,
                details=[item.to_detail() for item in result.invalid],
            )
        
        duration_ms = (time.perf_counter() - start_time) * 1000
        
        if self.observability:
            self.observability.record_metric("log_batch_size", accepted)
            self.observability.record_metric("log_ingest_duration_ms", duration_ms)
        self._audit("create", {"accepted": accepted, "duration_ms": duration_ms})
        
        self._logger.info(
            f"Log upload accepted: {accepted} entries",
            extra={"extra_data": {"accepted": accepted, "duration_ms": duration_ms}}
        )
        return IngestResult(accepted=accepted)
    
    def _audit(self, action: str, details: dict[str, Any]) -> None:
        if self.observability:
            self.observability.log_audit_event(
                event_type="log_upload",
                resource_type="log_batch",
                action=action,
                details=details,
            )
