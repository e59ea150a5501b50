import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class ResolverSettings:
    service_name: str = os.getenv("RESOLVER_SERVICE_NAME", "api2")
    host: str = os.getenv("RESOLVER_HOST", "0.0.0.0")
    port: int = int(os.getenv("RESOLVER_PORT", "4000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"
    enable_metrics: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_allow_origins.split(",") if item.strip()]


settings = ResolverSettings()
