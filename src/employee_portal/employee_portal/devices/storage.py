from __future__ import annotations

from typing import Dict, MutableMapping, Optional, Protocol

from flask import session


class DeviceStorage(Protocol):
    """Key/value storage scoped to one browser (local-storage semantics)."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class InMemoryDeviceStorage(DeviceStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SessionDeviceStorage(DeviceStorage):
    """Stores device keys in the signed Flask session cookie.

    Each browser profile carries its own cookie jar, so each gets its own device id.
    """

    def __init__(self, store: Optional[MutableMapping] = None):
        self._store = store

    @property
    def _items(self) -> MutableMapping:
        return self._store if self._store is not None else session

    def get_item(self, key: str) -> Optional[str]:
        value = self._items.get(key)
        return str(value) if value else None

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        if hasattr(self._items, "permanent"):
            self._items.permanent = True

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
