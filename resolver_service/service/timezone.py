"""Timezone alias table and resolution.

Aliases are matched case-sensitively. Anything not in the table,
including a missing value, resolves to UTC; that is a fallback and
never an error.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "UTC"

TIMEZONE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "UTC": "UTC",
        "EST": "America/New_York",
        "US/Eastern": "America/New_York",
        "PST": "America/Los_Angeles",
        "US/Pacific": "America/Los_Angeles",
        "CET": "Europe/Berlin",
        "Europe/Berlin": "Europe/Berlin",
    }
)


@dataclass(frozen=True)
class ResolvedTimezone:
    requested: str
    zone_name: str
    zone: ZoneInfo
    fallback: bool


class TimezoneResolver:
    def __init__(
        self,
        aliases: Mapping[str, str] = TIMEZONE_ALIASES,
        default: str = DEFAULT_TIMEZONE,
    ) -> None:
        self._aliases = MappingProxyType(dict(aliases))
        self._default = default
        # Load every zone up front so a broken tz database fails at startup.
        self._zones = {name: ZoneInfo(name) for name in {*self._aliases.values(), default}}

    def resolve(self, requested: str | None) -> ResolvedTimezone:
        label = requested if requested is not None else self._default
        zone_name = self._aliases.get(label)
        fallback = zone_name is None
        if fallback:
            zone_name = self._default
        return ResolvedTimezone(
            requested=label,
            zone_name=zone_name,
            zone=self._zones[zone_name],
            fallback=fallback,
        )

    def localize(self, resolved: ResolvedTimezone, moment: datetime) -> datetime:
        return moment.astimezone(resolved.zone)
