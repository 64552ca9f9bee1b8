"""
Aggregation module for component log summaries.
"""

from aggregation.service import (
    ComponentStats,
    LogSummary,
    LogSummaryService,
    summarize,
)

__all__ = ["ComponentStats", "LogSummary", "LogSummaryService", "summarize"]
