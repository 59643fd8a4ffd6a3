from __future__ import annotations

from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packet_api.api.routes import build_packet_router
from packet_api.errors import ApiError
from packet_api.schemas import ErrorResponse, HealthResponse
from packet_api.services import PacketAssemblyService, PageCanvasBuilder, SourceFetcher
from packet_api.settings import Settings, is_hardened_environment, load_settings
from packet_api.telemetry import RequestMetrics, generate_trace_id

LOGGER = logging.getLogger(__name__)


def _default_allow_origin(origins: tuple[str, ...]) -> str | None:
    if "*" in origins:
        return "*"
    if len(origins) == 1:
        return origins[0]
    return None


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Request validation failed"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = str(first.get("msg", "invalid value"))
    if location:
        return f"{location}: {detail}"
    return detail


def build_assembly_service(settings: Settings) -> PacketAssemblyService:
    return PacketAssemblyService(
        fetcher=SourceFetcher(
            base_url=settings.source_base_url,
            timeout_seconds=settings.source_fetch_timeout_seconds,
            max_download_bytes=settings.source_max_download_bytes,
        ),
        canvas=PageCanvasBuilder(
            title=settings.packet_title,
            footer=settings.packet_footer,
        ),
    )


def create_app(
    *,
    settings: Settings | None = None,
    assembly_service: PacketAssemblyService | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    assembly_service = assembly_service or build_assembly_service(settings)
    default_allow_origin = _default_allow_origin(settings.cors_allowed_origins)
    request_metrics = RequestMetrics()

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allowed_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=[
            "Content-Disposition",
            "x-trace-id",
            "x-packet-page-count",
            "x-packet-failed-units",
        ],
        max_age=600,
    )

    def _error_response(
        *,
        status_code: int,
        trace_id: str,
        error: str,
        message: str,
    ) -> JSONResponse:
        payload = ErrorResponse(error=error, message=message, trace_id=trace_id)
        headers = {"x-trace-id": trace_id}
        if default_allow_origin:
            headers["Access-Control-Allow-Origin"] = default_allow_origin
        return JSONResponse(
            status_code=status_code,
            content=payload.model_dump(),
            headers=headers,
        )

    @app.middleware("http")
    async def trace_middleware(request: Request, call_next):
        request.state.trace_id = generate_trace_id()
        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-trace-id"] = request.state.trace_id
            if default_allow_origin:
                response.headers.setdefault(
                    "Access-Control-Allow-Origin", default_allow_origin
                )
            return response
        finally:
            if request.url.path != "/health":
                request_metrics.record_api_response(
                    status_code=status_code,
                    duration_seconds=time.perf_counter() - start_time,
                )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        trace_id = getattr(request.state, "trace_id", generate_trace_id())
        LOGGER.warning("Rejected malformed packet request: %s", _validation_message(exc))
        return _error_response(
            status_code=500,
            trace_id=trace_id,
            error="Invalid packet request",
            message=_validation_message(exc),
        )

    @app.exception_handler(ApiError)
    async def api_exception_handler(request: Request, exc: ApiError):
        trace_id = getattr(request.state, "trace_id", generate_trace_id())
        LOGGER.warning("Packet request failed: %s", exc.message)
        return _error_response(
            status_code=exc.status_code,
            trace_id=trace_id,
            error=exc.error,
            message=exc.message,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        trace_id = getattr(request.state, "trace_id", generate_trace_id())
        LOGGER.exception("Unhandled API exception", exc_info=exc)
        message = "Unexpected server error"
        if not is_hardened_environment(settings.environment):
            message = str(exc) or message
        return _error_response(
            status_code=500,
            trace_id=trace_id,
            error="Internal server error",
            message=message,
        )

    app.include_router(
        build_packet_router(
            assembly_service,
            request_metrics=request_metrics,
            max_documents=settings.packet_max_documents,
        )
    )

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service=settings.app_name,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )

    @app.get("/ops/metrics", tags=["ops"])
    async def ops_metrics() -> dict[str, object]:
        return {"request_metrics": request_metrics.snapshot()}

    return app


app = create_app()
