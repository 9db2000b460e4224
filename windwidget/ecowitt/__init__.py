"""Ecowitt cloud API client and response parsers."""

from .client import ECOWITT_BASE_URL, WIND_SPEED_UNIT_KNOTS, EcowittClient
from .parser import (
    MAX_HISTORY_POINTS,
    HistoryResult,
    RealtimeResult,
    format_timestamp,
    parse_history,
    parse_realtime,
)

__all__ = [
    "ECOWITT_BASE_URL",
    "WIND_SPEED_UNIT_KNOTS",
    "EcowittClient",
    "MAX_HISTORY_POINTS",
    "HistoryResult",
    "RealtimeResult",
    "format_timestamp",
    "parse_history",
    "parse_realtime",
]
