import logging

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gateway_service import __version__
from gateway_service.api.time.endpoint import router as time_router
from gateway_service.config import GatewaySettings, settings
from gateway_service.service.proxy import PUBLIC_DETAILS, UpstreamError
from time_shared.api.health import build_service_router
from time_shared.observability import (
    REQUEST_ID_HEADER,
    MetricsRegistry,
    RequestMetricsAndLoggingMiddleware,
    configure_logging,
    new_request_id,
    setup_cors,
)
from time_shared.schema.error import ErrorResponse
from time_shared.schema.health import ServiceInfoResponse

logger = logging.getLogger("gateway")


def create_app(
    app_settings: GatewaySettings = settings,
    resolver_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    configure_logging(app_settings.log_level, app_settings.log_json)

    app = FastAPI(title="Time Gateway", version=__version__)
    app.state.settings = app_settings
    app.state.resolver_transport = resolver_transport
    app.state.metrics = MetricsRegistry()

    setup_cors(app, app_settings.cors_origins())
    app.add_middleware(
        RequestMetricsAndLoggingMiddleware,
        metrics=app.state.metrics,
        logger_name="gateway.access",
        enable_metrics=app_settings.enable_metrics,
        accept_inbound_id=False,
    )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", None) or new_request_id()
        if app_settings.enable_metrics:
            request.app.state.metrics.record_upstream_failure(exc.code)
        body = ErrorResponse(
            error=exc.code,
            detail=PUBLIC_DETAILS.get(exc.code, "resolver call failed"),
            request_id=request_id,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(),
            headers={REQUEST_ID_HEADER: request_id},
        )

    info = ServiceInfoResponse(
        name=app_settings.service_name,
        version=__version__,
        description="Time Service Gateway",
        endpoints={"health": "/health", "time": "/time", "metrics": "/metrics"},
    )
    app.include_router(build_service_router(info, enable_metrics=app_settings.enable_metrics))
    app.include_router(time_router)
    return app


app = create_app()


def run() -> None:
    logger.info(
        "gateway_starting host=%s port=%s resolver=%s",
        settings.host,
        settings.port,
        settings.resolver_base_url,
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
