"""
Structured logging and observability for the telemetry log backend.

Log records are written to stdout as one JSON object per line, tagged with
the current request ID. Metrics and audit events are emitted as log records
carrying structured fields. Tracing uses OpenTelemetry when it is installed
and an OTLP endpoint is configured.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from middleware.request_id import request_id_var


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs each record as a JSON object.
    
    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry
    - request_id: Correlation ID of the current request, if any
    
    Structured fields passed as extra={"extra_data": {...}} are merged
    into the top level of the object.
    """
    
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": request_id_var.get(""),
        }
        
        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno
        
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)
        
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        
        if record.stack_info:
            log_data["stack_trace"] = record.stack_info
        
        return json.dumps(log_data, default=str)


class ObservabilityService:
    """
    Centralized logging, metrics and tracing.
    
    Attributes:
        settings: Application settings (log_level, otel_endpoint, otel_service_name)
        tracer: OpenTelemetry tracer, or None when tracing is disabled
    """
    
    def __init__(self, settings: Optional[Any] = None):
        """
        Initialize the service and configure the root logger.
        
        Args:
            settings: Application settings; defaults apply when omitted
        """
        self.settings = settings
        self.tracer = None
        self._logger = logging.getLogger("observability")
        self._setup_logging()
        self._setup_tracing()
    
    def _setup_logging(self) -> None:
        log_level_name = getattr(self.settings, "log_level", None) or "INFO"
        log_level = getattr(logging, log_level_name.upper(), logging.INFO)
        
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        
        # Replace existing handlers to avoid duplicate lines
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(log_level)
        stdout_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(stdout_handler)
        
        self._logger.info("Observability initialized", extra={
            "extra_data": {"log_level": log_level_name}
        })
    
    def _setup_tracing(self) -> None:
        otel_endpoint = getattr(self.settings, "otel_endpoint", None)
        if not otel_endpoint:
            self._logger.debug("OpenTelemetry endpoint not configured, tracing disabled")
            return
        
        try:
            from opentelemetry import trace
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
            from opentelemetry.sdk.resources import SERVICE_NAME, Resource
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
        except ImportError as e:
            self._logger.warning(
                "OpenTelemetry packages not installed, tracing disabled",
                extra={"extra_data": {"error": str(e)}}
            )
            return
        
        service_name = getattr(self.settings, "otel_service_name", "telemetry-log-backend")
        provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otel_endpoint)))
        trace.set_tracer_provider(provider)
        self.tracer = trace.get_tracer(service_name)
        
        self._logger.info("OpenTelemetry tracing configured", extra={
            "extra_data": {"otel_endpoint": otel_endpoint, "service_name": service_name}
        })
    
    def record_metric(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Record a custom metric as a structured debug log line.
        
        Args:
            name: Name of the metric
            value: Metric value
            tags: Optional tags for metric dimensions
        """
        metric_data: Dict[str, Any] = {
            "metric_name": name,
            "metric_value": value,
        }
        if tags:
            metric_data["tags"] = tags
        
        self._logger.debug(
            f"Metric: {name}={value}",
            extra={"extra_data": metric_data}
        )
    
    def log_audit_event(
        self,
        event_type: str,
        resource_type: str,
        action: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an audit event for a state-changing operation.
        
        Args:
            event_type: Type of audit event (e.g., "log_upload")
            resource_type: Type of resource being acted upon
            action: Action being performed (e.g., "create", "create_failed")
            details: Additional details about the event
        """
        audit_data: Dict[str, Any] = {
            "audit_event": True,
            "event_type": event_type,
            "resource_type": resource_type,
            "action": action,
        }
        if details:
            audit_data["details"] = details
        
        self._logger.info(
            f"Audit: {event_type} - {action} on {resource_type}",
            extra={"extra_data": audit_data}
        )
    
    def create_span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        """
        Create a tracing span context manager.
        
        Args:
            name: Name of the span
            attributes: Optional attributes set on the span when it starts
            
        Returns:
            An OpenTelemetry span context manager, or a no-op one if tracing is off
        """
        if self.tracer is None:
            return _NoOpSpan()
        return self.tracer.start_as_current_span(name, attributes=attributes)
    
    def trace_operation(
        self,
        component: str,
        operation: str,
        attributes: Optional[Dict[str, Any]] = None
    ):
        """
        Create a span for one operation of a service component.
        
        Args:
            component: The component performing the work (e.g., "ingestion")
            operation: The operation being performed (e.g., "ingest_batch")
            attributes: Optional additional attributes for the span
            
        Returns:
            Span context manager named "<component>.<operation>"
        """
        span_attributes: Dict[str, Any] = {
            "component": component,
            "operation.name": operation,
        }
        if attributes:
            span_attributes.update(attributes)
        
        return self.create_span(f"{component}.{operation}", span_attributes)


class _NoOpSpan:
    """Stand-in span used when tracing is not configured."""
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        return False
    
    def set_attribute(self, key: str, value: Any) -> None:
        pass
    
    def record_exception(self, exception: Exception) -> None:
        pass


# Global observability service instance
_observability_service: Optional[ObservabilityService] = None


def get_observability_service() -> Optional[ObservabilityService]:
    """
    Get the global observability service instance.
    
    Returns:
        The service instance, or None if not initialized
    """
    return _observability_service


def initialize_observability(settings: Optional[Any] = None) -> ObservabilityService:
    """
    Initialize the global observability service.
    
    Args:
        settings: Application settings for configuration
        
    Returns:
        The initialized service
    """
    global _observability_service
    _observability_service = ObservabilityService(settings)
    return _observability_service


def trace_operation(
    observability: Optional[ObservabilityService],
    component: str,
    operation: str,
    attributes: Optional[Dict[str, Any]] = None
):
    """
    Span for an operation, or a no-op span when observability is not set up.
    
    Args:
        observability: The service to trace with, if any
        component: The component performing the work
        operation: The operation being performed
        attributes: Optional additional attributes for the span
        
    Returns:
        A span context manager
    """
    if observability is None:
        return _NoOpSpan()
    return observability.trace_operation(component, operation, attributes)
