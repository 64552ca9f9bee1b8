"""
Telemetry Log API application.

Wires the log store, ingestion, summary, cleaning and health services into
a FastAPI app and exposes them over HTTP.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aggregation.service import LogSummaryService
from cleaning.service import TelemetryCleaner
from config.settings import Settings, get_settings, validate_startup
from errors.exceptions import invalid_request
from errors.handlers import ErrorResponse, register_exception_handlers
from health.service import HealthCheckService
from ingestion.service import NOT_AN_ARRAY_MESSAGE, LogIngestionService
from middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from observability.service import initialize_observability
from storage.memory_store import InMemoryLogStore
from storage.store import LogStore

logger = logging.getLogger(__name__)

NOT_A_SAMPLE_ARRAY_MESSAGE = "Request body must be an array of telemetry samples"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


async def read_json_body(request: Request, error_message: str) -> Any:
    """
    Decode a strict JSON request body.

    NaN and Infinity literals are refused, as a standard JSON parser would.

    Args:
        request: The incoming request
        error_message: Message of the 400 error raised for an unreadable body

    Returns:
        The decoded JSON value

    Raises:
        AppException: INVALID_REQUEST if the body is not valid JSON
    """
    body = await request.body()
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(
            "Request body is not valid JSON",
            extra={"extra_data": {"path": request.url.path, "error": str(e)}}
        )
        raise invalid_request(error_message)


def get_ingestion_service(request: Request) -> LogIngestionService:
    return request.app.state.ingestion_service


def get_summary_service(request: Request) -> LogSummaryService:
    return request.app.state.summary_service


def get_cleaner(request: Request) -> TelemetryCleaner:
    return request.app.state.cleaner


def get_health_service(request: Request) -> HealthCheckService:
    return request.app.state.health_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(
        "Starting Telemetry Log API",
        extra={"extra_data": {"environment": app.state.settings.environment.value}}
    )
    yield
    logger.info(
        "Shutting down Telemetry Log API",
        extra={"extra_data": {"stored_entries": app.state.log_store.count()}}
    )


def create_app(
    settings: Optional[Settings] = None,
    log_store: Optional[LogStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application and wire its services.

    One log store is created per application and shared by the ingestion,
    summary and health services.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        log_store: Log store to use (a fresh in-memory store if omitted)

    Returns:
        The configured FastAPI application
    """
    settings = settings or get_settings()
    validate_startup(settings)
    observability = initialize_observability(settings)
    log_store = log_store if log_store is not None else InMemoryLogStore()

    app = FastAPI(title="Telemetry Log API", version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.log_store = log_store
    app.state.ingestion_service = LogIngestionService(log_store, observability=observability)
    app.state.summary_service = LogSummaryService(log_store, observability=observability)
    app.state.cleaner = TelemetryCleaner.from_settings(settings, observability=observability)
    app.state.health_service = HealthCheckService(log_store)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=600,
    )

    # Added after CORS so it wraps every request
    app.add_middleware(RequestIDMiddleware)

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    error_responses = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}

    @app.get("/")
    async def root():
        """Service banner."""
        return {"message": "Telemetry Log API is running"}

    @app.post("/logs/upload", responses=error_responses)
    async def upload_logs(
        request: Request,
        ingestion_service: LogIngestionService = Depends(get_ingestion_service),
    ):
        """
        Upload a batch of component log entries.

        The batch is committed only if every entry is valid. Otherwise the
        response lists each invalid entry with all of its failure reasons.
        """
        entries = await read_json_body(request, NOT_AN_ARRAY_MESSAGE)
        result = ingestion_service.ingest_batch(entries)
        return {"message": result.message}

    @app.get("/logs/summary")
    async def logs_summary(
        summary_service: LogSummaryService = Depends(get_summary_service),
    ):
        """Per-component min/max/avg/count and the most recent entry."""
        return summary_service.get_summary().model_dump(mode="json")

    @app.post("/telemetry/clean", responses=error_responses)
    async def clean_telemetry(
        request: Request,
        cleaner: TelemetryCleaner = Depends(get_cleaner),
    ):
        """
        Clean raw device samples into a chart-ready sequence.

        Samples must be in ascending timestamp order.
        """
        samples = await read_json_body(request, NOT_A_SAMPLE_ARRAY_MESSAGE)
        if not isinstance(samples, list):
            raise invalid_request(NOT_A_SAMPLE_ARRAY_MESSAGE)

        cleaned = cleaner.clean(samples)
        return [sample.model_dump(mode="json", by_alias=True) for sample in cleaned]

    @app.get("/health")
    async def health_basic(
        health_service: HealthCheckService = Depends(get_health_service),
    ):
        """Basic health check: the service is accepting requests."""
        return await health_service.check_health()

    @app.get("/health/live")
    async def health_live(
        health_service: HealthCheckService = Depends(get_health_service),
    ):
        """Liveness probe."""
        return await health_service.check_liveness()

    @app.get("/health/ready")
    async def health_ready(
        health_service: HealthCheckService = Depends(get_health_service),
    ):
        """
        Readiness probe.

        Returns 200 when the log store is usable, 503 otherwise.
        """
        health_status = await health_service.check_readiness()
        status_code = 200 if health_status.is_healthy else 503
        return JSONResponse(status_code=status_code, content=health_status.to_dict())


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port, log_level="info")
