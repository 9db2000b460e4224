"""Per-widget cache of the last live WindReading."""
from __future__ import annotations

import time
from typing import Callable, Optional

from pydantic import ValidationError

from windwidget.kv_store import KeyValueStore, StoreKey
from windwidget.migration import (
    CACHE_NAMESPACE,
    CACHE_READING_FIELD,
    CACHE_WRITTEN_AT_FIELD,
    ensure_migrated,
)
from windwidget.models import DataStatus, WindReading
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store")


def now_millis() -> int:
    return int(time.time() * 1000)


class CacheStore:
    """Last live reading plus its write time, keyed per widget instance.

    Readings are always stored with status LIVE; callers re-tag them
    (CACHED / STALE) depending on how they were read.
    """

    def __init__(
        self,
        store: KeyValueStore,
        widget_id: Optional[int] = None,
        *,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.widget_id = widget_id
        self.clock = clock
        ensure_migrated(store, widget_id)

    def _key(self, field: str) -> StoreKey:
        return StoreKey(CACHE_NAMESPACE, self.widget_id, field)

    def written_at(self) -> Optional[int]:
        raw = self.store.get(self._key(CACHE_WRITTEN_AT_FIELD))
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring malformed cache timestamp", extra={"widget_id": self.widget_id, "value": raw})
            return None

    def _load(self) -> Optional[WindReading]:
        raw = self.store.get(self._key(CACHE_READING_FIELD))
        if raw is None:
            return None
        try:
            return WindReading.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding undecodable cached reading",
                           extra={"widget_id": self.widget_id, "error": str(exc)})
            return None

    def read(self, max_age_millis: int) -> Optional[WindReading]:
        """Return the cached reading if it was written at most `max_age_millis` ago."""
        written_at = self.written_at()
        if written_at is None:
            return None
        age = self.clock() - written_at
        if age > max_age_millis:
            logger.debug("Cache expired", extra={"widget_id": self.widget_id, "age_ms": age})
            return None
        return self._load()

    def read_ignoring_age(self) -> Optional[WindReading]:
        return self._load()

    def write(self, reading: WindReading) -> None:
        payload = reading.with_status(DataStatus.LIVE).model_dump_json()
        self.store.set_many({
            self._key(CACHE_READING_FIELD): payload,
            self._key(CACHE_WRITTEN_AT_FIELD): str(self.clock()),
        })
        logger.debug("Cached reading", extra={"widget_id": self.widget_id, "points": len(reading.times)})
