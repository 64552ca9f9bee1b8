"""
Summary statistics over the component log store.

Summaries are recomputed from a store snapshot on every request and never
cached, so they always reflect exactly the batches committed so far.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from observability.service import (
    ObservabilityService,
    get_observability_service,
    trace_operation,
)
from storage.models import Component, LogEntry
from storage.store import LogStore

logger = logging.getLogger(__name__)


class ComponentStats(BaseModel):
    """Min, max, mean and count of one component's values."""
    
    min: float
    max: float
    avg: float
    count: int


class LogSummary(BaseModel):
    """
    Summary of every entry in the log store.
    
    Attributes:
        count: Total number of entries
        components: Stats per component; components with no entries are absent
        latest: Entry with the highest timestamp, or None for an empty store
    """
    
    count: int = 0
    components: Dict[Component, ComponentStats] = Field(default_factory=dict)
    latest: Optional[LogEntry] = None


def _latest_entry(entries: Sequence[LogEntry]) -> Optional[LogEntry]:
    latest: Optional[LogEntry] = None
    for entry in entries:
        # Strict comparison: the first entry reaching the max timestamp wins ties
        if latest is None or entry.timestamp > latest.timestamp:
            latest = entry
    return latest


def _mean(values: List[float]) -> float:
    total = sum(values)
    if math.isfinite(total):
        return total / len(values)
    # Finite values near the float limit can overflow when summed
    return sum(value / len(values) for value in values)


def _component_stats(values: List[float]) -> ComponentStats:
    return ComponentStats(
        min=min(values),
        max=max(values),
        avg=_mean(values),
        count=len(values),
    )


def summarize(entries: Sequence[LogEntry]) -> LogSummary:
    """
    Compute the summary of a sequence of log entries.
    
    Args:
        entries: Entries in store order
        
    Returns:
        LogSummary; an empty sequence gives count 0, no components and no latest
    """
    if not entries:
        return LogSummary()
    
    values_by_component: Dict[Component, List[float]] = {
        component: [] for component in Component
    }
    for entry in entries:
        values_by_component[entry.component].append(entry.value)
    
    components = {
        component: _component_stats(values)
        for component, values in values_by_component.items()
        if values
    }
    
    return LogSummary(
        count=len(entries),
        components=components,
        latest=_latest_entry(entries),
    )


class LogSummaryService:
    """
    Computes summaries over a log store.
    
    Attributes:
        store: The log store to summarize
        observability: Service used for tracing, if initialized
    """
    
    def __init__(
        self,
        store: LogStore,
        observability: Optional[ObservabilityService] = None
    ):
        self.store = store
        self.observability = observability or get_observability_service()
    
    def get_summary(self) -> LogSummary:
        """Summarize a consistent snapshot of the store."""
        with trace_operation(self.observability, "aggregation", "get_summary") as span:
            entries = self.store.snapshot()
            span.set_attribute("log.entry_count", len(entries))
            summary = summarize(entries)
        
        logger.debug(
            "Log summary computed",
            extra={"extra_data": {
                "count": summary.count,
                "components": [component.value for component in summary.components],
            }}
        )
        return summary
