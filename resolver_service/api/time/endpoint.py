from fastapi import APIRouter, Depends, Query, Request

from resolver_service.service.time import build_time_response
from resolver_service.service.timezone import TimezoneResolver
from time_shared.schema.time import TimeResponse

router = APIRouter(tags=["time"])


def get_timezone_resolver(request: Request) -> TimezoneResolver:
    return request.app.state.timezone_resolver


@router.get("/time", response_model=TimeResponse)
def get_time(
    request: Request,
    timezone: str | None = Query(default=None),
    resolver: TimezoneResolver = Depends(get_timezone_resolver),
) -> TimeResponse:
    return build_time_response(resolver, timezone, request.state.request_id)
