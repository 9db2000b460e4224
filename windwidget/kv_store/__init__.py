"""Key-value storage backends."""

from .base import KeyValueStore, StoreKey
from .encrypted import EncryptedKeyValueStore
from .factory import build_backend, build_secure_store
from .memory import InMemoryKeyValueStore
from .redis import RedisKeyValueStore

__all__ = [
    "KeyValueStore",
    "StoreKey",
    "EncryptedKeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "build_backend",
    "build_secure_store",
]
