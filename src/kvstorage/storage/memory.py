"""In-memory implementation of the key-value repository.

Thread-safe, dictionary-based storage with the same outcome semantics as the
Tarantool backend, suitable for development and testing.
"""

import threading

from kvstorage.observability.logging import get_logger
from kvstorage.storage.errors import AlreadyExistsError, NotFoundError
from kvstorage.storage.models import Record

logger = get_logger(__name__)


class InMemoryKVRepository:
    """Thread-safe in-memory implementation of KVRepository.

    Attributes:
        _records: Dictionary mapping key to stored value bytes
        _lock: Lock guarding every read and write
    """

    def __init__(self) -> None:
        """Initialize the in-memory repository."""
        self._records: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def insert(self, key: str, value: bytes) -> Record:
        logger.debug("insert_requested", key=key, value=value)
        with self._lock:
            if key in self._records:
                raise AlreadyExistsError()
            self._records[key] = bytes(value)
        return Record(key=key, value=bytes(value))

    def select(self, key: str) -> Record:
        logger.debug("select_requested", key=key)
        with self._lock:
            if key not in self._records:
                raise NotFoundError()
            return Record(key=key, value=self._records[key])

    def update(self, key: str, value: bytes) -> Record:
        logger.debug("update_requested", key=key, value=value)
        with self._lock:
            if key not in self._records:
                raise NotFoundError()
            self._records[key] = bytes(value)
            return Record(key=key, value=self._records[key])

    def delete(self, key: str) -> Record:
        logger.debug("delete_requested", key=key)
        with self._lock:
            if key not in self._records:
                raise NotFoundError()
            return Record(key=key, value=self._records.pop(key))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
