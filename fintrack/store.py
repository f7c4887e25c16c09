"""
Key-value stores backing the persisted collections.

The collections only need three things from persistence: read a key,
write a key, and hear about writes made elsewhere. ``KeyValueStore`` is
that contract; change notification goes through an injected ``EventBus``
so the UI and the tests can observe writes the same way.
"""

import contextlib
import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from fintrack.events import STORE_CHANGED, Event, EventBus

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class KeyValueStore(ABC):
    """
    Abstract get/set/subscribe store.

    ``set`` must make the new value visible to the next ``get`` before it
    returns, and then notify subscribers of that key. ``update`` runs a whole
    read-modify-write under the store's lock, so concurrent callers never
    overwrite each other's changes.
    """

    def __init__(self, bus: Optional[EventBus] = None):
        self.bus = bus or EventBus()
        self._lock = threading.RLock()
        self._listeners: Dict[Tuple[str, Listener], Callable[[Event, dict], dict]] = {}

    @abstractmethod
    def _read(self, key: str, default: Any) -> Any:
        pass

    @abstractmethod
    def _write(self, key: str, value: Any) -> None:
        pass

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return a copy of the value stored under ``key``.

        Args:
            key: Collection key, e.g. ``"transactions"``
            default: Returned when nothing has been stored yet

        Returns:
            The stored value; callers may mutate it freely
        """
        return copy.deepcopy(self._read(key, default))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._write(key, copy.deepcopy(value))
            current = self.get(key)
        self.bus.publish(STORE_CHANGED, {"key": key, "value": current})

    def update(self, key: str, change: Callable[[Any], Any], default: Any = None) -> Any:
        """
        Apply ``change`` to the current value of ``key`` and store the result.

        Args:
            key: Collection key
            change: Receives a copy of the current value; returns the new
                value, or None to leave the key untouched
            default: Current value when nothing has been stored yet

        Returns:
            The value written, or None when ``change`` made no change
        """
        with self._lock:
            updated = change(self.get(key, default))
            if updated is None:
                return None
            self._write(key, copy.deepcopy(updated))
            current = self.get(key)
        self.bus.publish(STORE_CHANGED, {"key": key, "value": current})
        return current

    def subscribe(self, key: str, listener: Listener) -> None:
        """Call ``listener(new_value)`` after every write to ``key``."""
        if (key, listener) in self._listeners:
            return

        def _handler(event: Event, payload: dict) -> dict:
            if payload.get("key") == key:
                listener(payload.get("value"))
            return {}

        self._listeners[(key, listener)] = _handler
        self.bus.subscribe(STORE_CHANGED, _handler)

    def unsubscribe(self, key: str, listener: Listener) -> None:
        handler = self._listeners.pop((key, listener), None)
        if handler is not None:
            self.bus.unsubscribe(STORE_CHANGED, handler)


class InMemoryStore(KeyValueStore):
    """Process-local store, used by the tests and as a scratch backend."""

    def __init__(self, bus: Optional[EventBus] = None):
        super().__init__(bus)
        self._data: Dict[str, Any] = {}

    def _read(self, key: str, default: Any) -> Any:
        return self._data.get(key, default)

    def _write(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """
    All keys in one JSON document on disk.

    Several stores may point at the same file (one per UI session). They share
    a lock keyed by the resolved path, and each read picks up the file again
    when it changed on disk, so a read-modify-write always starts from the
    latest document. Writes go to a sibling temp file that replaces the target
    in one step; a failed write leaves the previous document in place.

    A missing file starts empty, an unreadable one is logged and replaced on
    the next write.
    """

    _path_locks: Dict[Path, Any] = {}
    _path_locks_guard = threading.Lock()

    def __init__(self, path: Path, bus: Optional[EventBus] = None):
        super().__init__(bus)
        self.path = Path(path)
        self._lock = self._lock_for(self.path)
        self._stamp: Optional[Tuple[int, int, int]] = None
        self._data: Dict[str, Any] = {}
        self._refresh()

    @classmethod
    def _lock_for(cls, path: Path) -> threading.RLock:
        with cls._path_locks_guard:
            return cls._path_locks.setdefault(path.resolve(), threading.RLock())

    def _file_stamp(self) -> Optional[Tuple[int, int, int]]:
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    def _refresh(self) -> None:
        stamp = self._file_stamp()
        if stamp == self._stamp:
            return
        self._data = self._load()
        self._stamp = stamp

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Could not read store %s, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.error("Store %s does not hold a JSON object, starting empty", self.path)
            return {}
        return data

    def _dump(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
            raise

    def _read(self, key: str, default: Any) -> Any:
        with self._lock:
            self._refresh()
            return self._data.get(key, default)

    def _write(self, key: str, value: Any) -> None:
        with self._lock:
            self._refresh()
            data = dict(self._data)
            data[key] = value
            self._dump(data)
            self._data = data
            self._stamp = self._file_stamp()
