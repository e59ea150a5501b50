from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    service: str
    timestamp: str


class ServiceInfoResponse(BaseModel):
    name: str
    version: str
    description: str
    endpoints: dict[str, str] = Field(default_factory=dict)
