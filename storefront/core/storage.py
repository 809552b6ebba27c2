"""
Session storage

DurableStore is the localStorage analogue: it outlives a tab and is shared by
every tab of a browser. EphemeralStore is the sessionStorage analogue: one per
tab, gone when the tab closes, invisible to other tabs.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageEvent:
    """A change to one durable key, as seen by other tabs"""
    key: str
    old_value: Optional[str]
    new_value: Optional[str]
    origin: Optional[str] = None


StorageListener = Callable[[StorageEvent], Any]


class StorageSubscription:
    """Handle returned by DurableStore.subscribe"""

    def __init__(self, store: "DurableStore", tab_id: Optional[str], listener: StorageListener):
        self._store = store
        self.tab_id = tab_id
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._store._remove_subscription(self)


class DurableStore:
    """
    String key/value store persisted as a JSON file.

    With no path the data lives only in memory, which is what tests and
    short-lived scripts want. Listeners are told about every change made
    by a tab other than their own.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._data: dict[str, str] = {}
        self._subscriptions: list[StorageSubscription] = []
        self._lock = threading.Lock()

        if self.path and self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read durable store {self.path}: {e}")
            return

        if isinstance(data, dict):
            self._data = {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)
        tmp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        """Get a value by key"""
        return self._data.get(key)

    def set(self, key: str, value: str, origin: Optional[str] = None) -> None:
        """Store a value and notify the other tabs"""
        with self._lock:
            old_value = self._data.get(key)
            self._data[key] = value
            self._flush()
        if old_value != value:
            self._notify(StorageEvent(key, old_value, value, origin))

    def remove(self, key: str, origin: Optional[str] = None) -> None:
        """Remove a key and notify the other tabs"""
        with self._lock:
            old_value = self._data.pop(key, None)
            self._flush()
        if old_value is not None:
            self._notify(StorageEvent(key, old_value, None, origin))

    def keys(self) -> list[str]:
        return list(self._data)

    def subscribe(self, listener: StorageListener, tab_id: Optional[str] = None) -> StorageSubscription:
        """
        Listen for changes.

        Args:
            listener: Called with a StorageEvent for each change
            tab_id: Changes whose origin equals this id are not delivered
        """
        subscription = StorageSubscription(self, tab_id, listener)
        self._subscriptions.append(subscription)
        return subscription

    def _remove_subscription(self, subscription: StorageSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _notify(self, event: StorageEvent) -> None:
        for subscription in list(self._subscriptions):
            if event.origin is not None and subscription.tab_id == event.origin:
                continue
            try:
                subscription.listener(event)
            except Exception:
                logger.exception(f"Storage listener failed for key {event.key}")


class EphemeralStore:
    """Tab-scoped key/value store; never shared, never persisted"""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()
