"""HTTP transport with bounded retry and explicit backoff for connection failures."""
from __future__ import annotations

import time
from typing import Callable, Sequence

import requests

from windwidget.errors import NetworkError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="transport")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_DELAYS_MS = (1000, 2000, 4000)
DEFAULT_TIMEOUT_SECONDS = 30.0

# Only connection-level failures are retried; HTTP error statuses are returned as-is.
RETRYABLE_EXCEPTIONS = (requests.ConnectionError, requests.Timeout, OSError)


def _is_retryable(exc: BaseException) -> bool:
    # RequestException subclasses OSError, but e.g. InvalidURL or TooManyRedirects are not I/O failures
    if isinstance(exc, requests.RequestException):
        return isinstance(exc, (requests.ConnectionError, requests.Timeout))
    return isinstance(exc, OSError)


def _sleep_ms(delay_ms: int) -> None:
    time.sleep(delay_ms / 1000)


class RetryTransport:
    """Send requests through a session, retrying I/O failures with backoff.

    Any response that arrives is returned immediately, whatever its status
    code. Connection errors and timeouts are retried up to `max_retries`
    times, sleeping `backoff_delays_ms[attempt]` between tries (the last
    entry is reused once the schedule runs out). When retries are exhausted
    the last failure is raised as `NetworkError`.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_delays_ms: Sequence[int] = DEFAULT_BACKOFF_DELAYS_MS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        sleeper: Callable[[int], None] | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.max_retries = max_retries
        self.backoff_delays_ms = list(backoff_delays_ms)
        self.timeout = timeout
        self.sleeper = sleeper or _sleep_ms

    def _delay_for(self, attempt: int) -> int:
        """Backoff before retry number `attempt + 1`."""
        if not self.backoff_delays_ms:
            return 0
        if attempt < len(self.backoff_delays_ms):
            return self.backoff_delays_ms[attempt]
        return self.backoff_delays_ms[-1]

    def _prepare(self, request: requests.Request | requests.PreparedRequest) -> requests.PreparedRequest:
        if isinstance(request, requests.PreparedRequest):
            return request
        return self.session.prepare_request(request)

    def execute(self, request: requests.Request | requests.PreparedRequest) -> requests.Response:
        """Send `request`, retrying connection failures per the backoff schedule."""
        prepared = self._prepare(request)
        attempt = 0
        while True:
            try:
                return self.session.send(prepared, timeout=self.timeout)
            except RETRYABLE_EXCEPTIONS as exc:
                if not _is_retryable(exc):
                    raise
                if attempt >= self.max_retries:
                    logger.error(
                        "Giving up after %d attempts: %s %s (%s)",
                        attempt + 1, prepared.method, prepared.path_url.split("?")[0], exc,
                    )
                    raise NetworkError(
                        f"{prepared.method} {prepared.path_url.split('?')[0]} failed after {attempt + 1} attempts: {exc}",
                        attempts=attempt + 1,
                    ) from exc
                delay = self._delay_for(attempt)
                logger.warning(
                    "Connection failure on attempt %d; retrying in %d ms",
                    attempt + 1, delay, extra={"error": str(exc)},
                )
                if delay > 0:
                    self.sleeper(delay)
                attempt += 1

    def close(self) -> None:
        self.session.close()
