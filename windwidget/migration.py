"""Versioned migrations for per-widget storage, run once at store initialization.

Each widget namespace carries a `schema_version` marker. Steps newer than the
marker run in order and the marker is bumped after each one, so a step never
runs twice for the same widget.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from windwidget.kv_store import KeyValueStore, StoreKey
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="migration")

CREDENTIALS_NAMESPACE = "credentials"
CACHE_NAMESPACE = "cache"
META_NAMESPACE = "meta"

CREDENTIAL_FIELDS = ("application_key", "api_key", "mac_address", "location_name")
REQUIRED_CREDENTIAL_FIELDS = ("application_key", "api_key", "mac_address")
CACHE_READING_FIELD = "reading"
CACHE_WRITTEN_AT_FIELD = "written_at"
SCHEMA_VERSION_FIELD = "schema_version"


def schema_version_key(widget_id: Optional[int]) -> StoreKey:
    return StoreKey(META_NAMESPACE, widget_id, SCHEMA_VERSION_FIELD)


def read_schema_version(store: KeyValueStore, widget_id: Optional[int]) -> int:
    raw = store.get(schema_version_key(widget_id))
    try:
        return int(raw) if raw is not None else 0
    except ValueError:
        logger.warning("Ignoring malformed schema marker", extra={"widget_id": widget_id, "value": raw})
        return 0


def migrate_legacy_entries(store: KeyValueStore, widget_id: Optional[int]) -> None:
    """v1: copy credentials and cache from the shared namespace into a widget's own."""
    if widget_id is None:
        return

    def has_all(ns_widget: Optional[int]) -> bool:
        return all(store.get(StoreKey(CREDENTIALS_NAMESPACE, ns_widget, f)) for f in REQUIRED_CREDENTIAL_FIELDS)

    def has_any(ns_widget: Optional[int]) -> bool:
        return any(store.get(StoreKey(CREDENTIALS_NAMESPACE, ns_widget, f)) for f in REQUIRED_CREDENTIAL_FIELDS)

    if not has_any(widget_id) and has_all(None):
        copied = {}
        for field in CREDENTIAL_FIELDS:
            value = store.get(StoreKey(CREDENTIALS_NAMESPACE, None, field))
            if value is not None:
                copied[StoreKey(CREDENTIALS_NAMESPACE, widget_id, field)] = value
        store.set_many(copied)
        logger.info("Copied legacy credentials", extra={"widget_id": widget_id})

    reading_key = StoreKey(CACHE_NAMESPACE, widget_id, CACHE_READING_FIELD)
    if store.get(reading_key) is None:
        legacy_reading = store.get(StoreKey(CACHE_NAMESPACE, None, CACHE_READING_FIELD))
        if legacy_reading is not None:
            legacy_written_at = store.get(StoreKey(CACHE_NAMESPACE, None, CACHE_WRITTEN_AT_FIELD)) or "0"
            store.set_many({
                reading_key: legacy_reading,
                StoreKey(CACHE_NAMESPACE, widget_id, CACHE_WRITTEN_AT_FIELD): legacy_written_at,
            })
            logger.info("Copied legacy cached reading", extra={"widget_id": widget_id})


MIGRATIONS: List[Tuple[int, Callable[[KeyValueStore, Optional[int]], None]]] = [
    (1, migrate_legacy_entries),
]
CURRENT_SCHEMA_VERSION = MIGRATIONS[-1][0]


def ensure_migrated(store: KeyValueStore, widget_id: Optional[int]) -> int:
    """Run pending migrations for `widget_id` and return the resulting schema version."""
    version = read_schema_version(store, widget_id)
    for target, step in MIGRATIONS:
        if target <= version:
            continue
        step(store, widget_id)
        store.set(schema_version_key(widget_id), str(target))
        version = target
        logger.debug("Migrated widget storage", extra={"widget_id": widget_id, "schema_version": target})
    return version
