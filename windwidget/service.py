"""Composition root: one store, one worker pool and one HTTP client shared by all widgets."""
from __future__ import annotations

import datetime as dt
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Dict, Iterable, Optional

from windwidget import config
from windwidget.cache import CacheStore
from windwidget.credentials import CredentialStore
from windwidget.ecowitt import EcowittClient
from windwidget.kv_store import KeyValueStore, build_secure_store
from windwidget.models import WindReading
from windwidget.orchestrator import WindDataOrchestrator
from windwidget.transport import RetryTransport
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="service")


def build_client(settings: config.Settings) -> EcowittClient:
    transport = RetryTransport(
        max_retries=settings.max_retries,
        backoff_delays_ms=settings.backoff_delays_ms,
        timeout=settings.http_timeout_seconds,
    )
    return EcowittClient(
        transport,
        base_url=settings.ecowitt_base_url,
        history_window=dt.timedelta(hours=settings.history_window_hours),
        history_max_points=settings.history_max_points,
    )


class WindWidgetService:
    """Hands out per-widget orchestrators built on shared resources.

    The executor is owned here unless one is passed in; `close()` shuts down
    only what this service created.
    """

    def __init__(
        self,
        settings: config.Settings | None = None,
        *,
        store: KeyValueStore | None = None,
        client: EcowittClient | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.settings = settings or config.settings
        self.store = store if store is not None else build_secure_store(self.settings)
        self.client = client or build_client(self.settings)
        self._owns_executor = executor is None
        # Real-time requests only; history runs on the fetching thread.
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max(1, self.settings.fetch_workers), thread_name_prefix="windwidget-fetch"
        )
        self._orchestrators: Dict[Optional[int], WindDataOrchestrator] = {}
        self._lock = threading.Lock()

    def credential_store(self, widget_id: Optional[int] = None) -> CredentialStore:
        return self.orchestrator(widget_id).credentials

    def orchestrator(self, widget_id: Optional[int] = None) -> WindDataOrchestrator:
        with self._lock:
            orch = self._orchestrators.get(widget_id)
            if orch is None:
                orch = WindDataOrchestrator(
                    CredentialStore(self.store, widget_id, default_location=self.settings.default_location_name),
                    CacheStore(self.store, widget_id),
                    self.client,
                    self.executor,
                    cache_max_age_millis=self.settings.cache_max_age_millis,
                )
                self._orchestrators[widget_id] = orch
            return orch

    def fetch(self, widget_id: Optional[int] = None, force_refresh: bool = False) -> WindReading:
        return self.orchestrator(widget_id).fetch(force_refresh=force_refresh)

    def refresh_widgets(self, widget_ids: Iterable[Optional[int]], force_refresh: bool = False) -> Dict[Optional[int], WindReading]:
        """Fetch every listed widget in turn (periodic trigger hand-off)."""
        results: Dict[Optional[int], WindReading] = {}
        for widget_id in widget_ids:
            results[widget_id] = self.fetch(widget_id, force_refresh=force_refresh)
        logger.info("Refreshed widgets", extra={"count": len(results), "force_refresh": force_refresh})
        return results

    def close(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=True)
        self.client.close()
