import json
import logging
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "x-request-id"
REQUEST_ID_PARAM = "request_id"

_EXTRA_KEYS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "latency_ms",
    "client_ip",
    "timezone",
    "resolved_zone",
    "upstream_url",
    "error_code",
)


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler()
    if json_logs:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.addHandler(handler)


def new_request_id() -> str:
    return str(uuid.uuid4())


def normalize_request_id(raw: str | None) -> str | None:
    """Return the canonical UUID form of ``raw``, or None if it is not a UUID."""
    if not raw:
        return None
    try:
        return str(uuid.UUID(raw.strip()))
    except ValueError:
        return None


def request_id_for(request: Request, accept_inbound: bool = True) -> str:
    """Request id for ``request``: a supplied UUID when accepted, else a fresh uuid4."""
    if not accept_inbound:
        return new_request_id()
    supplied = normalize_request_id(request.headers.get(REQUEST_ID_HEADER))
    if supplied is None:
        supplied = normalize_request_id(request.query_params.get(REQUEST_ID_PARAM))
    return supplied or new_request_id()


@dataclass
class MetricsRegistry:
    requests_total: int = 0
    requests_inflight: int = 0
    requests_by_status: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    upstream_failures_by_code: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    request_latency_ms_sum: float = 0.0
    request_latency_ms_count: int = 0
    _lock: Lock = field(default_factory=Lock)

    def record_request(self, status_code: int, latency_ms: float) -> None:
        with self._lock:
            self.requests_total += 1
            self.requests_by_status[str(status_code)] += 1
            self.request_latency_ms_sum += latency_ms
            self.request_latency_ms_count += 1

    def set_inflight(self, delta: int) -> None:
        with self._lock:
            self.requests_inflight += delta
            if self.requests_inflight < 0:
                self.requests_inflight = 0

    def record_upstream_failure(self, code: str) -> None:
        with self._lock:
            self.upstream_failures_by_code[code] += 1

    def render_prometheus(self) -> str:
        with self._lock:
            lines = [
                "# TYPE http_requests_total counter",
                f"http_requests_total {self.requests_total}",
                "# TYPE http_requests_inflight gauge",
                f"http_requests_inflight {self.requests_inflight}",
                "# TYPE http_request_latency_ms_sum counter",
                f"http_request_latency_ms_sum {self.request_latency_ms_sum}",
                "# TYPE http_request_latency_ms_count counter",
                f"http_request_latency_ms_count {self.request_latency_ms_count}",
                "# TYPE http_requests_by_status_total counter",
            ]
            for code, count in sorted(self.requests_by_status.items()):
                lines.append(f'http_requests_by_status_total{{status="{code}"}} {count}')
            lines.append("# TYPE upstream_failures_total counter")
            for code, count in sorted(self.upstream_failures_by_code.items()):
                lines.append(f'upstream_failures_total{{error="{code}"}} {count}')
            return "\n".join(lines) + "\n"


class RequestMetricsAndLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        metrics: MetricsRegistry,
        logger_name: str,
        enable_metrics: bool = True,
        accept_inbound_id: bool = True,
    ):
        super().__init__(app)
        self._metrics = metrics
        self._enable_metrics = enable_metrics
        self._accept_inbound_id = accept_inbound_id
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        request_id = request_id_for(request, accept_inbound=self._accept_inbound_id)
        request.state.request_id = request_id
        start = time.perf_counter()
        self._metrics.set_inflight(1)

        response: Response | None = None
        exc: Exception | None = None
        try:
            response = await call_next(request)
            return response
        except Exception as err:  # noqa: BLE001
            exc = err
            raise
        finally:
            latency_ms = (time.perf_counter() - start) * 1000.0
            status_code = response.status_code if response else 500
            self._metrics.set_inflight(-1)
            if self._enable_metrics:
                self._metrics.record_request(status_code=status_code, latency_ms=latency_ms)

            extra = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "latency_ms": round(latency_ms, 2),
                "client_ip": request.client.host if request.client else None,
            }
            if exc is None:
                self._logger.info("request_complete", extra=extra)
            else:
                self._logger.exception("request_failed", extra=extra)

            if response is not None:
                response.headers[REQUEST_ID_HEADER] = request_id


def setup_cors(app: FastAPI, origins: list[str]) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
