"""Key-value storage backends for persisted application state."""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from hskvocab.models.base import SessionLocal, init_db, session_scope
from hskvocab.models.models import StorageEntry

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Minimal string key-value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key if present."""
        raise NotImplementedError("Subclasses must implement this method")


class MemoryStorage(KeyValueStorage):
    """Storage kept in a dict; contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


class SqlKeyValueStorage(KeyValueStorage):
    """Storage backed by the storage_entries table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal, create_tables: bool = True):
        """Initialize the storage with a session factory."""
        self.session_factory = session_factory
        if create_tables:
            init_db()

    def get_item(self, key: str) -> Optional[str]:
        with session_scope(self.session_factory) as db:
            entry = db.get(StorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with session_scope(self.session_factory) as db:
            entry = db.get(StorageEntry, key)
            if entry:
                entry.value = value
            else:
                db.add(StorageEntry(key=key, value=value))
        logger.debug(f"Stored {len(value)} characters under key {key}")

    def remove_item(self, key: str) -> None:
        with session_scope(self.session_factory) as db:
            db.query(StorageEntry).filter(StorageEntry.key == key).delete()
