"""Shared protocol and key type for key-value storage backends."""

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol


@dataclass(frozen=True)
class StoreKey:
    """Structured key: which store, which widget instance, which field.

    `widget_id=None` addresses the shared/default namespace.
    """
    namespace: str
    widget_id: Optional[int]
    field: str

    def as_tuple(self) -> tuple:
        return (self.namespace, self.widget_id, self.field)


class KeyValueStore(Protocol):
    """Protocol for string-valued key-value storage backends."""

    def get(self, key: StoreKey) -> Optional[str]:
        """Return the stored value, or None if absent."""

    def set(self, key: StoreKey, value: str) -> None:
        """Store a value, overwriting any previous one."""

    def set_many(self, items: Mapping[StoreKey, str]) -> None:
        """Store several values together."""

    def delete(self, key: StoreKey) -> None:
        """Remove a value without raising if it is absent."""
