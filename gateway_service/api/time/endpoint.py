from fastapi import APIRouter, Depends, Query, Request

from gateway_service.config import GatewaySettings
from gateway_service.service.time import relay_time
from time_shared.schema.error import ErrorResponse
from time_shared.schema.time import TimeResponse

router = APIRouter(tags=["time"])


def get_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


@router.get(
    "/time",
    response_model=TimeResponse,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def get_time(
    request: Request,
    timezone: str | None = Query(default=None),
    app_settings: GatewaySettings = Depends(get_settings),
) -> TimeResponse:
    return await relay_time(
        app_settings,
        timezone,
        request.state.request_id,
        transport=request.app.state.resolver_transport,
    )
