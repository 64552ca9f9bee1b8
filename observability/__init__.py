"""
Observability module for structured logging, metrics and tracing.

This module provides:
- JSONFormatter for structured JSON log output
- ObservabilityService for centralized logging, metrics and audit events
- Optional OpenTelemetry tracing when a collector endpoint is configured
"""

from observability.service import (
    JSONFormatter,
    ObservabilityService,
    get_observability_service,
    initialize_observability,
    trace_operation,
)

__all__ = [
    "JSONFormatter",
    "ObservabilityService",
    "get_observability_service",
    "initialize_observability",
    "trace_operation",
]
