import httpx
import pytest

from gateway_service.config import GatewaySettings
from gateway_service.service.proxy import UpstreamError, forward_get
from gateway_service.service.time import relay_time

REQUEST_ID = "7d3e1c2a-5b4f-4a6e-8c9d-0e1f2a3b4c5d"


@pytest.mark.asyncio
async def test_forward_get_returns_json_object() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))

    payload = await forward_get(
        "http://resolver.test/time",
        params={},
        headers={},
        request_id=REQUEST_ID,
        timeout_s=1.0,
        transport=transport,
    )
    assert payload == {"ok": True}


@pytest.mark.asyncio
async def test_forward_get_does_not_retry() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        await forward_get(
            "http://resolver.test/time",
            params={},
            headers={},
            request_id=REQUEST_ID,
            timeout_s=1.0,
            transport=httpx.MockTransport(handler),
        )

    assert len(calls) == 1
    assert excinfo.value.status_code == 503
    assert excinfo.value.code == "downstream_unavailable"


@pytest.mark.asyncio
async def test_forward_get_logs_failure_with_request_id(caplog) -> None:
    caplog.set_level("INFO", logger="gateway.proxy")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("connect timed out", request=request)

    with pytest.raises(UpstreamError):
        await forward_get(
            "http://resolver.test/time",
            params={},
            headers={},
            request_id=REQUEST_ID,
            timeout_s=1.0,
            transport=httpx.MockTransport(handler),
        )

    failures = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(failures) == 1
    assert failures[0].request_id == REQUEST_ID
    assert failures[0].error_code == "downstream_timeout"
    assert failures[0].upstream_url == "http://resolver.test/time"
    assert failures[0].latency_ms >= 0


@pytest.mark.asyncio
async def test_relay_time_sends_request_id_header_and_rewrites_source() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "timestamp": "2024-01-15T13:00:00.000+01:00",
                "timezone": "CET",
                "request_id": request.headers["x-request-id"],
                "source": "api2",
            },
        )

    app_settings = GatewaySettings(resolver_base_url="http://resolver.test/", resolver_timeout_s=1.0)
    relayed = await relay_time(app_settings, "CET", REQUEST_ID, transport=httpx.MockTransport(handler))

    assert seen[0].headers["x-request-id"] == REQUEST_ID
    assert seen[0].url.path == "/time"
    assert relayed.model_dump() == {
        "timestamp": "2024-01-15T13:00:00.000+01:00",
        "timezone": "CET",
        "request_id": REQUEST_ID,
        "source": "api1->api2",
    }


@pytest.mark.asyncio
async def test_relay_time_warns_on_request_id_mismatch(caplog) -> None:
    caplog.set_level("WARNING", logger="gateway.time")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "timestamp": "2024-01-15T12:00:00.000Z",
                "timezone": "UTC",
                "request_id": "00000000-0000-4000-8000-000000000000",
                "source": "api2",
            },
        )

    app_settings = GatewaySettings(resolver_base_url="http://resolver.test", resolver_timeout_s=1.0)
    relayed = await relay_time(app_settings, None, REQUEST_ID, transport=httpx.MockTransport(handler))

    assert relayed.request_id == "00000000-0000-4000-8000-000000000000"
    assert any(r.getMessage().startswith("request_id_mismatch") for r in caplog.records)
