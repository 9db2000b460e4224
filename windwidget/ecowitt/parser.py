"""Parse Ecowitt history and real-time wind payloads into normalized results.

Both endpoints wrap each metric in an envelope:

    history:   data.wind.wind_speed = {"unit": "knots", "list": {"1690000000": "10.5", ...}}
    real_time: data.wind.wind_speed = {"unit": "knots", "value": "11.2", "time": "..."}

Any of wind_speed / wind_gust / wind_direction may be missing. Only a missing
speed series is fatal for history; every other gap defaults to 0.
"""
from __future__ import annotations

import datetime as dt
import json
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from windwidget.errors import ApplicationError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="ecowitt_parser")

MAX_HISTORY_POINTS = 36  # 3 hours at 5-minute resolution
TIME_FORMAT = "%Y-%m-%dT%H:%M"

Payload = Union[Mapping[str, Any], str, bytes, None]


@dataclass(frozen=True)
class HistoryResult:
    """Chart series aligned to ascending timestamps."""
    times: List[str]
    speeds: List[float]
    directions: List[float]
    gusts: List[float]


@dataclass(frozen=True)
class RealtimeResult:
    """Single current-instant reading."""
    speed: float
    direction: float
    gust: float


def _decode(payload: Payload) -> Mapping[str, Any]:
    """Accept a decoded dict or raw JSON text."""
    if payload is None:
        raise ApplicationError("empty response body")
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise ApplicationError(f"response is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ApplicationError(f"unexpected response shape: {type(payload).__name__}")
    return payload


def _wind_section(payload: Payload) -> Mapping[str, Any]:
    """Return data.wind from a successful (code 0) response."""
    data = _decode(payload)
    code = data.get("code")
    if code != 0:
        raise ApplicationError(f"error code {code}: {data.get('msg')}", code=code)
    body = data.get("data")
    wind = body.get("wind") if isinstance(body, Mapping) else None
    if not isinstance(wind, Mapping):
        raise ApplicationError("response has no wind section", code=code)
    return wind


def _metric(wind: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    envelope = wind.get(name)
    return envelope if isinstance(envelope, Mapping) else {}


def _to_float(value: Any) -> float:
    """Parse an Ecowitt value string, defaulting to 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _to_direction(value: Any) -> float:
    degrees = _to_float(value) % 360.0
    # tiny negatives round up to exactly 360.0
    return degrees if degrees < 360.0 else 0.0


def _to_speed(value: Any) -> float:
    return max(0.0, _to_float(value))


def _to_epoch(key: Any) -> Optional[int]:
    try:
        return int(key)
    except (TypeError, ValueError):
        return None


def format_timestamp(epoch_seconds: int, tz: dt.tzinfo | None = None) -> str:
    """Render epoch seconds as "YYYY-MM-DDTHH:MM" (process-local zone when tz is None)."""
    moment = dt.datetime.fromtimestamp(epoch_seconds, tz=dt.timezone.utc).astimezone(tz)
    return moment.strftime(TIME_FORMAT)


def parse_history(
    payload: Payload,
    *,
    max_points: int = MAX_HISTORY_POINTS,
    tz: dt.tzinfo | None = None,
) -> Optional[HistoryResult]:
    """Parse a /history response; None when there is no usable speed series."""
    try:
        wind = _wind_section(payload)
        speed_list = _metric(wind, "wind_speed").get("list")
        if not isinstance(speed_list, Mapping):
            raise ApplicationError("history has no wind_speed series")
    except ApplicationError as exc:
        logger.warning("Unusable Ecowitt history response: %s", exc, extra={"code": exc.code})
        return None

    raw_gusts = _metric(wind, "wind_gust").get("list")
    raw_directions = _metric(wind, "wind_direction").get("list")
    gust_list: Mapping[str, Any] = raw_gusts if isinstance(raw_gusts, Mapping) else {}
    direction_list: Mapping[str, Any] = raw_directions if isinstance(raw_directions, Mapping) else {}

    timestamps = sorted(ts for ts in (_to_epoch(k) for k in speed_list) if ts is not None)
    recent = timestamps[-max_points:] if max_points > 0 else []
    if not recent:
        logger.warning("Ecowitt history speed series is empty")
        return None

    keys = [str(ts) for ts in recent]
    return HistoryResult(
        times=[format_timestamp(ts, tz) for ts in recent],
        speeds=[_to_speed(speed_list.get(k)) for k in keys],
        directions=[_to_direction(direction_list.get(k)) for k in keys],
        gusts=[_to_speed(gust_list.get(k)) for k in keys],
    )


def parse_realtime(payload: Payload) -> Optional[RealtimeResult]:
    """Parse a /real_time response; missing metrics default to 0."""
    try:
        wind = _wind_section(payload)
    except ApplicationError as exc:
        logger.warning("Unusable Ecowitt real_time response: %s", exc, extra={"code": exc.code})
        return None

    return RealtimeResult(
        speed=_to_speed(_metric(wind, "wind_speed").get("value")),
        direction=_to_direction(_metric(wind, "wind_direction").get("value")),
        gust=_to_speed(_metric(wind, "wind_gust").get("value")),
    )
