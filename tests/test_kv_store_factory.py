import unittest
from unittest.mock import patch

from cryptography.fernet import Fernet

from windwidget.kv_store import factory
from windwidget.kv_store import EncryptedKeyValueStore, InMemoryKeyValueStore, RedisKeyValueStore, StoreKey


class DummySettings:
    def __init__(self, redis_url=None, encryption_key=None, redis_prefix="windwidget:"):
        self.redis_url = redis_url
        self.redis_prefix = redis_prefix
        self.encryption_key = encryption_key


class _PingingRedis:
    def ping(self):
        return True


class _UnreachableRedis:
    def ping(self):
        raise ConnectionError("refused")


class _RedisModule:
    def __init__(self, client):
        outer = self

        class Redis:
            @staticmethod
            def from_url(url):
                outer.url = url
                return client

        self.Redis = Redis


KEY = StoreKey("credentials", 3, "api_key")


class TestBuildBackend(unittest.TestCase):
    def test_no_redis_url_uses_memory(self):
        self.assertIsInstance(factory.build_backend(DummySettings()), InMemoryKeyValueStore)

    def test_reachable_redis_is_used(self):
        fake = _RedisModule(_PingingRedis())
        with patch.object(factory, "redis", fake):
            store = factory.build_backend(DummySettings(redis_url="redis://localhost:6379/0", redis_prefix="t:"))
        self.assertIsInstance(store, RedisKeyValueStore)
        self.assertEqual(store.prefix, "t:")
        self.assertEqual(fake.url, "redis://localhost:6379/0")

    def test_unreachable_redis_falls_back_to_memory(self):
        with patch.object(factory, "redis", _RedisModule(_UnreachableRedis())):
            store = factory.build_backend(DummySettings(redis_url="redis://localhost:6379/0"))
        self.assertIsInstance(store, InMemoryKeyValueStore)


class TestBuildSecureStore(unittest.TestCase):
    def test_without_key_returns_plain_backend(self):
        backend = InMemoryKeyValueStore()
        store = factory.build_secure_store(DummySettings(), backend=backend)
        self.assertIs(store, backend)

    def test_invalid_key_falls_back_to_plain_backend(self):
        backend = InMemoryKeyValueStore()
        store = factory.build_secure_store(DummySettings(encryption_key="not-a-fernet-key"), backend=backend)
        self.assertIs(store, backend)

    def test_valid_key_encrypts_at_rest(self):
        backend = InMemoryKeyValueStore()
        store = factory.build_secure_store(
            DummySettings(encryption_key=Fernet.generate_key().decode("ascii")), backend=backend
        )

        self.assertIsInstance(store, EncryptedKeyValueStore)
        store.set(KEY, "my-api-key")
        self.assertEqual(store.get(KEY), "my-api-key")
        self.assertNotEqual(backend.get(KEY), "my-api-key")
        self.assertNotIn("my-api-key", backend.get(KEY))


class TestEncryptedKeyValueStore(unittest.TestCase):
    def test_set_many_encrypts_each_value(self):
        backend = InMemoryKeyValueStore()
        store = EncryptedKeyValueStore.from_key(backend, Fernet.generate_key())
        other = StoreKey("credentials", 3, "mac_address")
        store.set_many({KEY: "k", other: "AA:BB"})
        self.assertEqual(store.get(other), "AA:BB")
        self.assertNotEqual(backend.get(other), "AA:BB")

    def test_value_from_other_key_reads_as_absent(self):
        backend = InMemoryKeyValueStore()
        EncryptedKeyValueStore.from_key(backend, Fernet.generate_key()).set(KEY, "secret")
        store = EncryptedKeyValueStore.from_key(backend, Fernet.generate_key())
        self.assertIsNone(store.get(KEY))

    def test_leftover_plaintext_reads_as_absent(self):
        backend = InMemoryKeyValueStore()
        backend.set(KEY, "plaintext")
        store = EncryptedKeyValueStore.from_key(backend, Fernet.generate_key())
        self.assertIsNone(store.get(KEY))

    def test_delete_passes_through(self):
        backend = InMemoryKeyValueStore()
        store = EncryptedKeyValueStore.from_key(backend, Fernet.generate_key())
        store.set(KEY, "v")
        store.delete(KEY)
        self.assertIsNone(backend.get(KEY))

    def test_malformed_key_raises(self):
        with self.assertRaises(ValueError):
            EncryptedKeyValueStore.from_key(InMemoryKeyValueStore(), "short")


if __name__ == "__main__":
    unittest.main()
