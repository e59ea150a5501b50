import asyncio
import logging
import time

import httpx
from fastapi import HTTPException

from gateway_service.adapter.client.http import get_json

logger = logging.getLogger("gateway.proxy")


# Client-facing text per error code; the raw cause is only logged.
PUBLIC_DETAILS = {
    "downstream_unavailable": "resolver unavailable",
    "downstream_timeout": "resolver timed out",
    "downstream_error": "resolver returned an error",
    "downstream_invalid_response": "resolver returned an invalid response",
}


class UpstreamError(HTTPException):
    """A failed downstream call, tagged with a stable error code."""

    def __init__(self, status_code: int, code: str, detail: str) -> None:
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


async def forward_get(
    url: str,
    *,
    params: dict[str, str],
    headers: dict[str, str],
    request_id: str,
    timeout_s: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Single GET to ``url`` bounded by ``timeout_s`` in total. No retries."""
    start = time.perf_counter()
    logger.info("forwarding_to_resolver", extra={"request_id": request_id, "upstream_url": url})
    try:
        payload = await asyncio.wait_for(
            get_json(url, params=params, headers=headers, timeout_s=timeout_s, transport=transport),
            timeout=timeout_s,
        )
    except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
        detail = f"upstream get timed out after {timeout_s}s"
        raise _failure(504, "downstream_timeout", detail, url, request_id, start) from exc
    except httpx.HTTPStatusError as exc:
        detail = f"upstream returned status {exc.response.status_code}"
        raise _failure(502, "downstream_error", detail, url, request_id, start) from exc
    except httpx.TransportError as exc:
        detail = f"upstream get failed: {exc!r}"
        raise _failure(503, "downstream_unavailable", detail, url, request_id, start) from exc
    except ValueError as exc:
        detail = "upstream body is not JSON"
        raise _failure(502, "downstream_invalid_response", detail, url, request_id, start) from exc

    if not isinstance(payload, dict):
        detail = "upstream body is not a JSON object"
        raise _failure(502, "downstream_invalid_response", detail, url, request_id, start)

    logger.info(
        "resolver_responded",
        extra={"request_id": request_id, "upstream_url": url, "latency_ms": _elapsed_ms(start)},
    )
    return payload


def _failure(
    status_code: int,
    code: str,
    detail: str,
    url: str,
    request_id: str,
    start: float,
) -> UpstreamError:
    logger.error(
        "resolver_call_failed: %s",
        detail,
        extra={
            "request_id": request_id,
            "upstream_url": url,
            "error_code": code,
            "latency_ms": _elapsed_ms(start),
        },
    )
    return UpstreamError(status_code=status_code, code=code, detail=detail)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 2)
