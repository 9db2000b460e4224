"""Domain vocabulary for wind readings and station credentials.

A `WindReading` is what the renderer consumes: the chart series for the
trailing window plus the current-instant values shown in the bottom bar, and
a `status` saying where the data came from.
"""

from __future__ import annotations

from bisect import bisect_right
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, model_validator

from windwidget.errors import ConfigurationError

# Knot thresholds; force n covers [BEAUFORT_THRESHOLDS_KTS[n], BEAUFORT_THRESHOLDS_KTS[n + 1])
BEAUFORT_THRESHOLDS_KTS = (0, 1, 4, 7, 11, 17, 22, 28, 34, 41, 48, 56, 64)

CARDINAL_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


class DataStatus(str, Enum):
    """Provenance of a reading, surfaced to the user by the renderer."""
    LIVE = "live"
    CACHED = "cached"
    STALE = "stale"
    DEMO = "demo"


def knots_to_beaufort(knots: float) -> int:
    """Map a wind speed in knots to Beaufort force 0..12."""
    if knots < BEAUFORT_THRESHOLDS_KTS[1]:
        return 0
    return bisect_right(BEAUFORT_THRESHOLDS_KTS, knots) - 1


def degrees_to_cardinal(degrees: float) -> str:
    """Bucket a bearing into one of 8 compass sectors, each 45 degrees wide."""
    if degrees < 22.5 or degrees >= 337.5:
        return "N"
    return CARDINAL_POINTS[int((degrees + 22.5) // 45)]


class WindReading(BaseModel):
    """Immutable wind snapshot: chart series plus current-instant values."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    location_name: str
    times: List[str]  # "2024-01-20T17:00", local time
    speeds: List[float]  # knots
    directions: List[float]  # degrees, 0=N 90=E
    gusts: List[float]  # knots
    current_speed: float = 0.0
    current_direction: float = 0.0
    current_gust: float = 0.0
    status: DataStatus = DataStatus.LIVE
    last_updated_millis: int = 0

    @model_validator(mode="before")
    @classmethod
    def _default_current_values(cls, data: Any) -> Any:
        """Fill missing current values from the tail of the matching series."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for current, series in (
            ("current_speed", "speeds"),
            ("current_direction", "directions"),
            ("current_gust", "gusts"),
        ):
            if data.get(current) is None:
                values = data.get(series) or []
                data[current] = values[-1] if values else 0.0
        return data

    @model_validator(mode="after")
    def _check_series(self) -> "WindReading":
        n = len(self.times)
        if not (len(self.speeds) == len(self.directions) == len(self.gusts) == n):
            raise ValueError(
                f"series lengths differ: times={n} speeds={len(self.speeds)} "
                f"directions={len(self.directions)} gusts={len(self.gusts)}"
            )
        for d in [*self.directions, self.current_direction]:
            if not 0 <= d < 360:
                raise ValueError(f"direction out of range [0, 360): {d}")
        for v in [*self.speeds, *self.gusts, self.current_speed, self.current_gust]:
            if v < 0:
                raise ValueError(f"negative speed/gust: {v}")
        return self

    def with_status(self, status: DataStatus) -> "WindReading":
        """Return a copy carrying a different provenance tag."""
        return self.model_copy(update={"status": status})

    @property
    def max_speed(self) -> float:
        return max(self.speeds, default=0.0)

    @property
    def max_gust(self) -> float:
        return max(self.gusts, default=0.0)

    @property
    def direction_cardinal(self) -> str:
        return degrees_to_cardinal(self.current_direction)

    @property
    def beaufort(self) -> int:
        return knots_to_beaufort(self.current_speed)

    def __str__(self) -> str:
        return (
            f"{self.location_name}: {self.current_speed:.1f}kts {self.direction_cardinal} "
            f"(gust {self.current_gust:.1f}) [{self.status.value}, {len(self.times)} pts]"
        )


class Credentials(BaseModel):
    """Ecowitt API credentials and display name for one widget instance."""

    model_config = ConfigDict(frozen=True)

    application_key: str = ""
    api_key: str = ""
    mac_address: str = ""
    location_name: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.application_key and self.api_key and self.mac_address)

    def require_configured(self) -> "Credentials":
        """Return self, or raise ConfigurationError naming the blank fields."""
        if self.is_configured:
            return self
        missing = [
            name for name in ("application_key", "api_key", "mac_address")
            if not getattr(self, name)
        ]
        raise ConfigurationError(f"Missing Ecowitt credentials: {', '.join(missing)}")
