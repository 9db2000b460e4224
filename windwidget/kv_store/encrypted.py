"""Encrypt-at-rest wrapper around any key-value backend."""

from typing import Mapping, Optional

from cryptography.fernet import Fernet, InvalidToken

from windwidget.kv_store.base import KeyValueStore, StoreKey
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/encrypted")


class EncryptedKeyValueStore(KeyValueStore):
    """Fernet-encrypts values (AES-128-CBC + HMAC) before they reach the backend.

    Keys stay in the clear so the backend can still address them; values that
    fail to decrypt (wrong key, tampering, plaintext left over from an
    unencrypted run) read as absent.
    """

    def __init__(self, backend: KeyValueStore, fernet: Fernet) -> None:
        self.backend = backend
        self._fernet = fernet

    @classmethod
    def from_key(cls, backend: KeyValueStore, key: str | bytes) -> "EncryptedKeyValueStore":
        """Build from a urlsafe-base64 Fernet key; raises ValueError if malformed."""
        return cls(backend, Fernet(key))

    def _encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def get(self, key: StoreKey) -> Optional[str]:
        token = self.backend.get(key)
        if token is None:
            return None
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            logger.warning("Discarding undecryptable value", extra={"key": key.as_tuple(), "error": type(exc).__name__})
            return None

    def set(self, key: StoreKey, value: str) -> None:
        self.backend.set(key, self._encrypt(value))

    def set_many(self, items: Mapping[StoreKey, str]) -> None:
        self.backend.set_many({k: self._encrypt(v) for k, v in items.items()})

    def delete(self, key: StoreKey) -> None:
        self.backend.delete(key)
