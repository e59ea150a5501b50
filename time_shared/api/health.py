from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from time_shared.clock import format_instant, utc_now
from time_shared.schema.health import HealthResponse, ServiceInfoResponse


def build_service_router(info: ServiceInfoResponse, enable_metrics: bool = True) -> APIRouter:
    """Routes every tier serves: static info, liveness and metrics.

    ``/health`` never consults a downstream service; startup ordering
    between tiers relies on it answering as soon as the process is up.
    """
    router = APIRouter(tags=["health"])

    @router.get("/", response_model=ServiceInfoResponse)
    async def service_info() -> ServiceInfoResponse:
        return info

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(service=info.name, timestamp=format_instant(utc_now()))

    @router.get("/metrics", response_class=PlainTextResponse, include_in_schema=False)
    async def metrics(request: Request) -> str:
        if not enable_metrics:
            raise HTTPException(status_code=404, detail="metrics disabled")
        return request.app.state.metrics.render_prometheus()

    return router
