import logging

import uvicorn
from fastapi import FastAPI

from resolver_service import __version__
from resolver_service.api.time.endpoint import router as time_router
from resolver_service.config import ResolverSettings, settings
from resolver_service.service.timezone import TimezoneResolver
from time_shared.api.health import build_service_router
from time_shared.observability import (
    MetricsRegistry,
    RequestMetricsAndLoggingMiddleware,
    configure_logging,
    setup_cors,
)
from time_shared.schema.health import ServiceInfoResponse

logger = logging.getLogger("resolver")


def create_app(app_settings: ResolverSettings = settings) -> FastAPI:
    configure_logging(app_settings.log_level, app_settings.log_json)

    app = FastAPI(title="Time Resolver", version=__version__)
    app.state.settings = app_settings
    app.state.timezone_resolver = TimezoneResolver()
    app.state.metrics = MetricsRegistry()

    setup_cors(app, app_settings.cors_origins())
    app.add_middleware(
        RequestMetricsAndLoggingMiddleware,
        metrics=app.state.metrics,
        logger_name="resolver.access",
        enable_metrics=app_settings.enable_metrics,
    )

    info = ServiceInfoResponse(
        name=app_settings.service_name,
        version=__version__,
        description="Time Service Provider",
        endpoints={"health": "/health", "time": "/time", "metrics": "/metrics"},
    )
    app.include_router(build_service_router(info, enable_metrics=app_settings.enable_metrics))
    app.include_router(time_router)
    return app


app = create_app()


def run() -> None:
    logger.info("resolver_starting host=%s port=%s", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
