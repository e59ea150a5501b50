import logging

import httpx
from pydantic import ValidationError

from gateway_service.config import GatewaySettings
from gateway_service.service.proxy import UpstreamError, forward_get
from time_shared.observability import REQUEST_ID_HEADER
from time_shared.schema.time import SOURCE_GATEWAY, TimeResponse

logger = logging.getLogger("gateway.time")


async def relay_time(
    app_settings: GatewaySettings,
    timezone: str | None,
    request_id: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TimeResponse:
    """Ask the resolver for the time and re-attribute the answer as relayed.

    ``timestamp``, ``timezone`` and ``request_id`` come back exactly as the
    resolver produced them; only ``source`` changes.
    """
    params = {"timezone": timezone} if timezone is not None else {}
    url = app_settings.resolver_time_url
    payload = await forward_get(
        url,
        params=params,
        headers={REQUEST_ID_HEADER: request_id},
        request_id=request_id,
        timeout_s=app_settings.resolver_timeout_s,
        transport=transport,
    )

    try:
        upstream = TimeResponse.model_validate(payload)
    except ValidationError as exc:
        logger.error(
            "resolver_payload_invalid: %s error(s)",
            exc.error_count(),
            extra={"request_id": request_id, "upstream_url": url, "error_code": "downstream_invalid_response"},
        )
        raise UpstreamError(
            status_code=502,
            code="downstream_invalid_response",
            detail=f"upstream body is not a time response: {exc.error_count()} error(s)",
        ) from exc

    if upstream.request_id != request_id:
        logger.warning(
            "request_id_mismatch upstream=%s",
            upstream.request_id,
            extra={"request_id": request_id, "upstream_url": url},
        )

    return upstream.model_copy(update={"source": SOURCE_GATEWAY})
