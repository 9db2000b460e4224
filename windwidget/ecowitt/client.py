"""Helpers for fetching wind history and real-time data from the Ecowitt cloud API."""
from __future__ import annotations

import datetime as dt
from typing import Callable, Optional

import requests

from windwidget.ecowitt.parser import (
    MAX_HISTORY_POINTS,
    HistoryResult,
    RealtimeResult,
    parse_history,
    parse_realtime,
)
from windwidget.models import Credentials
from windwidget.transport import RetryTransport
from utils.logging_utils import get_tagged_logger, mask_secret

logger = get_tagged_logger(__name__, tag="ecowitt_client")

ECOWITT_BASE_URL = "https://api.ecowitt.net/api/v3/device"
WIND_SPEED_UNIT_KNOTS = 8
HISTORY_CYCLE_TYPE = "5min"
REQUEST_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class EcowittClient:
    """Build and send the two wind requests for one station.

    Non-2xx responses and unusable bodies yield None. A `NetworkError` from
    the transport (retries exhausted) propagates to the caller.
    """

    def __init__(
        self,
        transport: RetryTransport | None = None,
        *,
        base_url: str = ECOWITT_BASE_URL,
        history_window: dt.timedelta = dt.timedelta(hours=3),
        history_max_points: int = MAX_HISTORY_POINTS,
        now: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.transport = transport or RetryTransport()
        self.base_url = base_url.rstrip("/")
        self.history_window = history_window
        self.history_max_points = history_max_points
        self._now = now or (lambda: dt.datetime.now().astimezone())

    @staticmethod
    def _headers(credentials: Credentials) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-Application-Key": credentials.application_key,
            "X-API-Key": credentials.api_key,
        }

    def build_history_request(self, credentials: Credentials) -> requests.Request:
        """GET /history for the trailing window at 5-minute resolution, in knots."""
        end = self._now()
        start = end - self.history_window
        params = {
            "mac": credentials.mac_address,
            "start_date": start.strftime(REQUEST_DATE_FORMAT),
            "end_date": end.strftime(REQUEST_DATE_FORMAT),
            "cycle_type": HISTORY_CYCLE_TYPE,
            "call_back": "wind",
            "wind_speed_unitid": WIND_SPEED_UNIT_KNOTS,
        }
        return requests.Request("GET", f"{self.base_url}/history", params=params,
                                headers=self._headers(credentials))

    def build_realtime_request(self, credentials: Credentials) -> requests.Request:
        """GET /real_time for the current reading, in knots."""
        params = {
            "mac": credentials.mac_address,
            "call_back": "wind",
            "wind_speed_unitid": WIND_SPEED_UNIT_KNOTS,
        }
        return requests.Request("GET", f"{self.base_url}/real_time", params=params,
                                headers=self._headers(credentials))

    def _send(self, request: requests.Request, context: str) -> Optional[requests.Response]:
        resp = self.transport.execute(request)
        if not resp.ok:
            logger.warning(
                "Ecowitt %s HTTP error", context,
                extra={"status_code": resp.status_code, "mac": mask_secret(request.params.get("mac"))},
            )
            return None
        return resp

    def fetch_history(self, credentials: Credentials) -> Optional[HistoryResult]:
        """Fetch and parse the chart series; None on HTTP or payload errors."""
        resp = self._send(self.build_history_request(credentials), "history")
        if resp is None:
            return None
        result = parse_history(resp.content, max_points=self.history_max_points)
        if result is not None:
            logger.debug("Fetched %d history points", len(result.times))
        return result

    def fetch_realtime(self, credentials: Credentials) -> Optional[RealtimeResult]:
        """Fetch and parse the current reading; None on HTTP or payload errors."""
        resp = self._send(self.build_realtime_request(credentials), "real_time")
        if resp is None:
            return None
        return parse_realtime(resp.content)

    def close(self) -> None:
        self.transport.close()
