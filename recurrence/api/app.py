"""FastAPI binding of the exception registry, ingestion and notification endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from recurrence import __version__
from recurrence.errors import InvalidRequest, RecurrenceError
from recurrence.main import RecurrenceApplication
from recurrence.models.schemas import (
    HealthResponse,
    IngestionResponse,
    ListExceptionsResponse,
    RecordExceptionRequest,
    RecordExceptionResponse,
    SearchExceptionResponse,
)
from recurrence.notifications.models import NotifyRequest
from recurrence.observability.prometheus_metrics import generate_metrics
from recurrence.observability.tracing import (
    is_telemetry_configured,
    setup_telemetry,
    shutdown_telemetry,
)

logger = logging.getLogger(__name__)


def get_application(request: Request) -> RecurrenceApplication:
    return request.app.state.recurrence


AppDep = Annotated[RecurrenceApplication, Depends(get_application)]


async def handle_recurrence_error(_request: Request, exc: RecurrenceError) -> JSONResponse:
    """Render a RecurrenceError as ``{"error": {"kind", "message"}}``."""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind}: {exc.message}")
    else:
        logger.info(f"Rejected request: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


def create_app(application: RecurrenceApplication | None = None) -> FastAPI:
    """Create the Recurrence HTTP application.

    Args:
        application: Pre-built application; one is created from the
            environment configuration when omitted

    Returns:
        FastAPI app whose lifespan starts and stops the application
    """
    recurrence_app = application or RecurrenceApplication()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # An embedding process that configured tracing itself keeps ownership of it
        owns_telemetry = not is_telemetry_configured()
        setup_telemetry(
            environment=recurrence_app.config.environment,
            otlp_endpoint=recurrence_app.config.otlp_endpoint,
        )
        try:
            await recurrence_app.start()
            yield
        finally:
            await recurrence_app.stop()
            if owns_telemetry:
                shutdown_telemetry()

    app = FastAPI(
        title="Recurrence",
        description="Exception deduplication and support notification service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.recurrence = recurrence_app
    app.add_exception_handler(RecurrenceError, handle_recurrence_error)

    _register_exception_routes(app)
    _register_ingestion_routes(app)
    _register_notification_routes(app)
    _register_service_routes(app, metrics_enabled=recurrence_app.config.metrics_enabled)

    return app


def _register_exception_routes(app: FastAPI) -> None:
    @app.post("/exceptions", response_model=RecordExceptionResponse)
    async def record_exception(body: RecordExceptionRequest, recurrence: AppDep) -> Any:
        """Store one exception occurrence."""
        return await recurrence.registry.record(body.message, body.source_archive)

    @app.get("/exceptions/search", response_model=SearchExceptionResponse)
    async def search_exceptions(
        recurrence: AppDep,
        query: Annotated[str | None, Query()] = None,
    ) -> Any:
        """Exact-match search for a previously recorded exception."""
        return await recurrence.registry.search(query)

    @app.get("/exceptions", response_model=ListExceptionsResponse)
    async def list_exceptions(recurrence: AppDep) -> Any:
        """Every unique exception in first-observed order."""
        return await recurrence.registry.list_all()


def _register_ingestion_routes(app: FastAPI) -> None:
    @app.post("/upload", response_model=IngestionResponse)
    async def upload_archive(
        recurrence: AppDep,
        file: Annotated[UploadFile | None, File()] = None,
    ) -> Any:
        """Upload a zip archive and route its message and exception files."""
        if file is None:
            raise InvalidRequest("No file uploaded")

        data = await file.read()
        name = file.filename or "upload.zip"
        return await recurrence.orchestrator.process_archive(name, data)


def _register_notification_routes(app: FastAPI) -> None:
    @app.post("/notify")
    async def notify(body: NotifyRequest, recurrence: AppDep) -> dict[str, Any]:
        """Write a notification directly."""
        notification_id = await recurrence.sink.notify_request(body)
        return {"success": True, "id": notification_id}

    @app.get("/notifications")
    async def list_notifications(recurrence: AppDep) -> dict[str, Any]:
        notifications = await recurrence.sink.list_notifications()
        return {
            "count": len(notifications),
            "notifications": [n.model_dump(mode="json", by_alias=True) for n in notifications],
        }

    @app.get("/notifications/count")
    async def count_notifications(recurrence: AppDep) -> dict[str, int]:
        return {"count": await recurrence.sink.count()}


def _register_service_routes(app: FastAPI, metrics_enabled: bool) -> None:
    @app.get("/health", response_model=HealthResponse)
    async def health(recurrence: AppDep) -> Any:
        reachable = recurrence.store is not None and await recurrence.store.ping()
        return HealthResponse(
            status="ok" if reachable else "degraded",
            mode=recurrence.mode.mode_config.name,
            store=recurrence.store.backend_name if recurrence.store is not None else "uninitialized",
            store_reachable=reachable,
        )

    if metrics_enabled:

        @app.get("/metrics")
        async def metrics() -> Response:
            """Expose Prometheus metrics."""
            from prometheus_client import CONTENT_TYPE_LATEST

            return Response(content=generate_metrics(), media_type=CONTENT_TYPE_LATEST)
