"""Decide between cache, network and fallbacks to always produce a WindReading.

Order of preference:

1. a fresh cached reading (CACHED), unless the caller forces a refresh;
2. a live fetch merging history and real-time data (LIVE), cached on success;
3. the last cached reading regardless of age (STALE) if the live fetch raised;
4. synthetic demo data (DEMO) when there is nothing else, or no credentials.
"""
from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Callable, Optional

from windwidget.cache import CacheStore, now_millis
from windwidget.credentials import CredentialStore
from windwidget.demo import generate_demo_reading
from windwidget.ecowitt import EcowittClient, HistoryResult, RealtimeResult
from windwidget.errors import ConfigurationError
from windwidget.models import Credentials, DataStatus, WindReading
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="orchestrator")

DEFAULT_CACHE_MAX_AGE_MILLIS = 5 * 60 * 1000


def merge_readings(
    location_name: str,
    history: HistoryResult,
    realtime: Optional[RealtimeResult],
    *,
    updated_millis: int,
) -> WindReading:
    """Chart series from history; current values from real-time, else the history tail."""
    def current(live: Optional[float], series: list) -> float:
        if live is not None:
            return live
        return series[-1] if series else 0.0

    return WindReading(
        location_name=location_name,
        times=history.times,
        speeds=history.speeds,
        directions=history.directions,
        gusts=history.gusts,
        current_speed=current(realtime.speed if realtime else None, history.speeds),
        current_direction=current(realtime.direction if realtime else None, history.directions),
        current_gust=current(realtime.gust if realtime else None, history.gusts),
        status=DataStatus.LIVE,
        last_updated_millis=updated_millis,
    )


class WindDataOrchestrator:
    """Fetch pipeline for one widget instance. `fetch()` never raises."""

    def __init__(
        self,
        credentials: CredentialStore,
        cache: CacheStore,
        client: EcowittClient,
        executor: Executor,
        *,
        cache_max_age_millis: int = DEFAULT_CACHE_MAX_AGE_MILLIS,
        clock: Callable[[], int] = now_millis,
        demo_factory: Callable[..., WindReading] = generate_demo_reading,
    ) -> None:
        self.credentials = credentials
        self.cache = cache
        self.client = client
        self.executor = executor
        self.cache_max_age_millis = cache_max_age_millis
        self.clock = clock
        self.demo_factory = demo_factory

    @property
    def widget_id(self) -> Optional[int]:
        return self.cache.widget_id

    def fetch(self, force_refresh: bool = False) -> WindReading:
        """Return the best reading available right now, tagged with its provenance."""
        if not force_refresh:
            cached = self._fresh_cache()
            if cached is not None:
                logger.debug("Serving fresh cache", extra={"widget_id": self.widget_id})
                return cached.with_status(DataStatus.CACHED)

        try:
            return self._fetch_live()
        except Exception:
            logger.exception("Live fetch failed; falling back", extra={"widget_id": self.widget_id})
            return self._fallback()

    def _fresh_cache(self) -> Optional[WindReading]:
        try:
            return self.cache.read(self.cache_max_age_millis)
        except Exception as exc:
            logger.warning("Cache read failed; fetching live", extra={"widget_id": self.widget_id, "error": str(exc)})
            return None

    def _demo(self) -> WindReading:
        return self.demo_factory(location_name=self.credentials.default_location)

    def _fetch_live(self) -> WindReading:
        try:
            credentials = self.credentials.require()
        except ConfigurationError as exc:
            logger.info("%s; using demo data", exc, extra={"widget_id": self.widget_id})
            return self._demo()

        history, realtime = self._fetch_both(credentials)
        if history is None:
            logger.warning("No usable history; using demo data", extra={"widget_id": self.widget_id})
            return self._demo()

        merged = merge_readings(credentials.location_name, history, realtime, updated_millis=self.clock())
        self.cache.write(merged)
        logger.info("Fetched live reading", extra={"widget_id": self.widget_id, "points": len(merged.times),
                                                   "realtime": realtime is not None})
        return merged

    def _fetch_both(self, credentials: Credentials) -> tuple[Optional[HistoryResult], Optional[RealtimeResult]]:
        """History on the calling thread, real-time on the pool; only a history failure propagates.

        Pool workers only ever carry real-time requests.
        """
        realtime_future: Future = self.executor.submit(self.client.fetch_realtime, credentials)
        history = self.client.fetch_history(credentials)

        realtime: Optional[RealtimeResult] = None
        realtime_error = realtime_future.exception()
        if realtime_error is not None:
            logger.warning("Real-time fetch failed; using history tail",
                           extra={"widget_id": self.widget_id, "error": str(realtime_error)})
        else:
            realtime = realtime_future.result()

        return history, realtime

    def _fallback(self) -> WindReading:
        try:
            stale = self.cache.read_ignoring_age()
        except Exception as exc:
            logger.warning("Stale cache unavailable", extra={"widget_id": self.widget_id, "error": str(exc)})
            stale = None
        if stale is not None:
            return stale.with_status(DataStatus.STALE)
        return self._demo()
