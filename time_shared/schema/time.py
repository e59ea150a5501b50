from typing import Literal

from pydantic import BaseModel

SOURCE_RESOLVER = "api2"
SOURCE_GATEWAY = "api1->api2"

TimeSource = Literal["api2", "api1->api2"]


class TimeResponse(BaseModel):
    timestamp: str
    timezone: str
    request_id: str
    source: TimeSource
