import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class GatewaySettings:
    service_name: str = os.getenv("GATEWAY_SERVICE_NAME", "api1")
    host: str = os.getenv("GATEWAY_HOST", "0.0.0.0")
    port: int = int(os.getenv("GATEWAY_PORT", "3000"))
    resolver_base_url: str = os.getenv(
        "RESOLVER_BASE_URL", os.getenv("API2_URL", "http://api2:4000")
    )
    resolver_timeout_s: float = float(os.getenv("RESOLVER_TIMEOUT_S", "5.0"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"
    enable_metrics: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    def __post_init__(self) -> None:
        if not self.resolver_base_url.strip():
            raise ValueError("RESOLVER_BASE_URL must not be empty")
        if self.resolver_timeout_s <= 0:
            raise ValueError("RESOLVER_TIMEOUT_S must be positive")

    @property
    def resolver_time_url(self) -> str:
        return f"{self.resolver_base_url.rstrip('/')}/time"

    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_allow_origins.split(",") if item.strip()]


settings = GatewaySettings()
