import logging
from datetime import datetime

from resolver_service.service.timezone import TimezoneResolver
from time_shared.clock import format_instant, utc_now
from time_shared.schema.time import SOURCE_RESOLVER, TimeResponse

logger = logging.getLogger("resolver.time")


def build_time_response(
    resolver: TimezoneResolver,
    requested: str | None,
    request_id: str,
    now: datetime | None = None,
) -> TimeResponse:
    logger.info(
        "time_request_received",
        extra={"request_id": request_id, "timezone": requested},
    )
    resolved = resolver.resolve(requested)
    if resolved.fallback:
        logger.info(
            "timezone_fallback",
            extra={
                "request_id": request_id,
                "timezone": resolved.requested,
                "resolved_zone": resolved.zone_name,
            },
        )

    moment = resolver.localize(resolved, now or utc_now())
    timestamp = format_instant(moment)
    logger.info(
        "time_request_resolved",
        extra={
            "request_id": request_id,
            "timezone": resolved.requested,
            "resolved_zone": resolved.zone_name,
        },
    )
    return TimeResponse(
        timestamp=timestamp,
        timezone=resolved.requested,
        request_id=request_id,
        source=SOURCE_RESOLVER,
    )
