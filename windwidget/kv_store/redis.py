"""Redis-backed key-value store."""

import json
from typing import Mapping, Optional

from windwidget.kv_store.base import KeyValueStore, StoreKey
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/redis")


class RedisKeyValueStore(KeyValueStore):
    """Values live under `prefix + json([namespace, widget_id, field])`.

    e.g. `windwidget:["cache",42,"reading"]`.
    """

    def __init__(self, client, prefix: str = "windwidget:") -> None:
        """Initialize with a Redis client and key prefix."""
        logger.debug("Initializing RedisKeyValueStore")
        self.client = client
        self.prefix = prefix

    def _key(self, key: StoreKey) -> str:
        return f"{self.prefix}{json.dumps(list(key.as_tuple()), separators=(',', ':'), ensure_ascii=False)}"

    @staticmethod
    def _decode(raw) -> Optional[str]:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    def get(self, key: StoreKey) -> Optional[str]:
        return self._decode(self.client.get(self._key(key)))

    def set(self, key: StoreKey, value: str) -> None:
        self.client.set(self._key(key), value.encode("utf-8"))

    def set_many(self, items: Mapping[StoreKey, str]) -> None:
        if not items:
            return
        self.client.mset({self._key(k): v.encode("utf-8") for k, v in items.items()})

    def delete(self, key: StoreKey) -> None:
        try:
            self.client.delete(self._key(key))
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to delete key from Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort clear for all keys under the configured prefix."""
        try:
            for raw_key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(raw_key)
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to clear keys from Redis: %s", exc)
