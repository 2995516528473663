"""Storage layer for the key-value service.

This module provides the repository interface, the Tarantool and in-memory
backends, the tuple codec and the storage error taxonomy.
"""

from kvstorage.storage.base import KVRepository
from kvstorage.storage.connection import (
    ConnectionManager,
    StorageCredentials,
    connect,
    open_connection,
)
from kvstorage.storage.errors import (
    AlreadyExistsError,
    ConnectionFailedError,
    DeleteOperationFailed,
    ErrorKind,
    InsertOperationFailed,
    MalformedRecordError,
    NotFoundError,
    SelectOperationFailed,
    StorageError,
    UpdateOperationFailed,
)
from kvstorage.storage.memory import InMemoryKVRepository
from kvstorage.storage.models import Record
from kvstorage.storage.tarantool_repository import TarantoolKVRepository, classify_insert_outcome

__all__ = [
    "KVRepository",
    "Record",
    "TarantoolKVRepository",
    "InMemoryKVRepository",
    "classify_insert_outcome",
    "ConnectionManager",
    "StorageCredentials",
    "connect",
    "open_connection",
    "ErrorKind",
    "StorageError",
    "ConnectionFailedError",
    "AlreadyExistsError",
    "NotFoundError",
    "InsertOperationFailed",
    "SelectOperationFailed",
    "UpdateOperationFailed",
    "DeleteOperationFailed",
    "MalformedRecordError",
]
