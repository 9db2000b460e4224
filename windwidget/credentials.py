"""Per-widget storage for Ecowitt credentials and the display location."""
from __future__ import annotations

from typing import Optional

from windwidget.config import DEFAULT_LOCATION_NAME
from windwidget.kv_store import KeyValueStore, StoreKey
from windwidget.migration import (
    CREDENTIAL_FIELDS,
    CREDENTIALS_NAMESPACE,
    ensure_migrated,
)
from windwidget.models import Credentials
from utils.logging_utils import get_tagged_logger, mask_secret

logger = get_tagged_logger(__name__, tag="credential_store")


class CredentialStore:
    """Save and load credentials for one widget instance (or the shared namespace)."""

    def __init__(
        self,
        store: KeyValueStore,
        widget_id: Optional[int] = None,
        *,
        default_location: str = DEFAULT_LOCATION_NAME,
    ) -> None:
        self.store = store
        self.widget_id = widget_id
        self.default_location = default_location
        ensure_migrated(store, widget_id)

    def _key(self, field: str) -> StoreKey:
        return StoreKey(CREDENTIALS_NAMESPACE, self.widget_id, field)

    def save(self, application_key: str, api_key: str, mac_address: str, location_name: str) -> None:
        """Persist all four fields; blank location falls back to the default."""
        values = {
            "application_key": (application_key or "").strip(),
            "api_key": (api_key or "").strip(),
            "mac_address": (mac_address or "").strip(),
            "location_name": location_name.strip() if location_name and location_name.strip() else self.default_location,
        }
        self.store.set_many({self._key(field): values[field] for field in CREDENTIAL_FIELDS})
        logger.info(
            "Saved credentials",
            extra={"widget_id": self.widget_id, "application_key": mask_secret(values["application_key"]),
                   "mac": mask_secret(values["mac_address"])},
        )

    def _read(self) -> Credentials:
        return Credentials(
            application_key=self.store.get(self._key("application_key")) or "",
            api_key=self.store.get(self._key("api_key")) or "",
            mac_address=self.store.get(self._key("mac_address")) or "",
            location_name=self.store.get(self._key("location_name")) or self.default_location,
        )

    def load(self) -> Optional[Credentials]:
        """Return credentials, or None unless all three API fields are non-empty."""
        credentials = self._read()
        if not credentials.is_configured:
            return None
        return credentials

    def require(self) -> Credentials:
        """Like `load`, but raise ConfigurationError naming the blank fields."""
        return self._read().require_configured()

    def has_credentials(self) -> bool:
        return self.load() is not None
