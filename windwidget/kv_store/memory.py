"""In-memory key-value store, intended for development and tests."""

import threading
from typing import Dict, Mapping, Optional

from windwidget.kv_store.base import KeyValueStore, StoreKey

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/in_memory")


class InMemoryKeyValueStore(KeyValueStore):
    """Thread-safe dict-backed store (dev/test); contents die with the process."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryKeyValueStore")
        self._data: Dict[StoreKey, str] = {}
        self._lock = threading.Lock()

    def get(self, key: StoreKey) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: StoreKey, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def set_many(self, items: Mapping[StoreKey, str]) -> None:
        with self._lock:
            self._data.update(items)

    def delete(self, key: StoreKey) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        """Drop everything (tests)."""
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
