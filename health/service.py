"""
Health check service for the telemetry log backend.

The log store is the only dependency. It lives in process, so readiness
reduces to checking that the store can still be read.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from storage.store import LogStore

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class DependencyHealth:
    """
    Health status of a single dependency.
    
    Attributes:
        name: The name of the dependency (e.g., "log_store")
        healthy: Whether the dependency is usable
        response_time_ms: The time taken to check the dependency in milliseconds
        error: Optional error message if the check failed
        entry_count: Number of stored entries, when known
    """
    name: str
    healthy: bool
    response_time_ms: float
    error: Optional[str] = None
    entry_count: Optional[int] = None
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "healthy": self.healthy,
            "response_time_ms": round(self.response_time_ms, 2),
        }
        if self.error is not None:
            result["error"] = self.error
        if self.entry_count is not None:
            result["entry_count"] = self.entry_count
        return result


@dataclass
class HealthStatus:
    """
    Overall readiness of the service.
    
    Attributes:
        status: "healthy" or "unhealthy"
        timestamp: When the check was performed (ISO 8601, UTC)
        dependencies: Individual dependency statuses
    """
    status: str
    timestamp: str = field(default_factory=_utc_timestamp)
    dependencies: list[DependencyHealth] = field(default_factory=list)
    
    @property
    def is_healthy(self) -> bool:
        return self.status == "healthy"
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
        }


class HealthCheckService:
    """
    Service for health, liveness and readiness checks.
    
    Attributes:
        log_store: The log store whose readiness is reported
    """
    
    def __init__(self, log_store: LogStore):
        self.log_store = log_store
    
    async def check_health(self) -> dict[str, Any]:
        """Basic health check: the service is accepting requests."""
        return {"status": "ok", "timestamp": _utc_timestamp()}
    
    async def check_liveness(self) -> dict[str, Any]:
        """Liveness check: the process is running. Dependencies are not checked."""
        return {"status": "alive", "timestamp": _utc_timestamp()}
    
    async def check_readiness(self) -> HealthStatus:
        """
        Check that the log store can serve reads and writes.
        
        Returns:
            HealthStatus with a single log_store dependency entry
        """
        store_health = self._check_log_store()
        return HealthStatus(
            status="healthy" if store_health.healthy else "unhealthy",
            dependencies=[store_health],
        )
    
    def _check_log_store(self) -> DependencyHealth:
        start_time = time.perf_counter()
        
        try:
            healthy = self.log_store.health_check()
            entry_count = self.log_store.count() if healthy else None
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(f"Log store health check failed: {e}")
            return DependencyHealth(
                name="log_store",
                healthy=False,
                response_time_ms=elapsed_ms,
                error=f"Log store health check failed: {e}",
            )
        
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if not healthy:
            logger.warning(f"Log store health check returned False after {elapsed_ms:.2f}ms")
            return DependencyHealth(
                name="log_store",
                healthy=False,
                response_time_ms=elapsed_ms,
                error="Log store health check returned False",
            )
        
        return DependencyHealth(
            name="log_store",
            healthy=True,
            response_time_ms=elapsed_ms,
            entry_count=entry_count,
        )
