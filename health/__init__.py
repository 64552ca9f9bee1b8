"""
Health check module for the telemetry log backend.

Reports liveness of the process and readiness of the log store.
"""

from health.service import (
    DependencyHealth,
    HealthCheckService,
    HealthStatus,
)

__all__ = [
    "DependencyHealth",
    "HealthCheckService",
    "HealthStatus",
]
