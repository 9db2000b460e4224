"""Factory helpers for choosing the key-value backend at startup."""

from __future__ import annotations

try:
    import redis  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    redis = None

from windwidget import config
from windwidget.kv_store.base import KeyValueStore
from windwidget.kv_store.encrypted import EncryptedKeyValueStore
from windwidget.kv_store.memory import InMemoryKeyValueStore
from windwidget.kv_store.redis import RedisKeyValueStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="kv_store/factory")


def build_backend(settings: config.Settings | None = None) -> KeyValueStore:
    """Use Redis when configured and reachable, else an in-memory store."""
    settings = settings or config.settings
    logger.debug(
        "Initializing key-value backend",
        extra={"redis_url": mask_url(settings.redis_url) if settings.redis_url else None,
               "redis_package": bool(redis)},
    )
    if settings.redis_url and redis:
        try:
            client = redis.Redis.from_url(settings.redis_url)
            client.ping()
            logger.info("Using RedisKeyValueStore", extra={"redis_url": mask_url(settings.redis_url)})
            return RedisKeyValueStore(client, prefix=settings.redis_prefix)
        except Exception as exc:  # pragma: no cover - defensive
            logger.warning("Falling back to InMemoryKeyValueStore (Redis unavailable)", extra={"error": str(exc)})
    return InMemoryKeyValueStore()


def build_secure_store(
    settings: config.Settings | None = None,
    backend: KeyValueStore | None = None,
) -> KeyValueStore:
    """Wrap the backend with encryption when a usable key is configured.

    Decided once here; callers get the same KeyValueStore interface either way.
    """
    settings = settings or config.settings
    backend = backend if backend is not None else build_backend(settings)
    if not settings.encryption_key:
        logger.warning("No encryption key configured; credentials are stored unencrypted")
        return backend
    try:
        store = EncryptedKeyValueStore.from_key(backend, settings.encryption_key)
    except (ValueError, TypeError) as exc:
        logger.warning("Encryption key unusable; falling back to unencrypted storage", extra={"error": str(exc)})
        return backend
    logger.info("Using encrypted key-value storage")
    return store
