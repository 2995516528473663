"""Abstract repository interface for the key-value storage layer.

This module defines the Protocol every key-value backend implements, so the
use-case and API layers can swap the Tarantool backend for the in-memory one
without code changes.
"""

from typing import Protocol

from kvstorage.storage.models import Record


class KVRepository(Protocol):
    """Protocol for key-value storage operations.

    All failures are raised as ``StorageError`` subclasses.
    """

    def insert(self, key: str, value: bytes) -> Record:
        """Store a new record.

        Args:
            key: Primary key of the new record
            value: Raw JSON bytes

        Returns:
            The inserted record

        Raises:
            AlreadyExistsError: If the key is already present
            InsertOperationFailed: If the engine fails otherwise
        """
        ...

    def select(self, key: str) -> Record:
        """Retrieve a record by key.

        Args:
            key: Primary key to look up

        Returns:
            The stored record

        Raises:
            NotFoundError: If the key is absent
            SelectOperationFailed: If the response cannot be decoded
        """
        ...

    def update(self, key: str, value: bytes) -> Record:
        """Replace the value of an existing record.

        Args:
            key: Primary key of the record
            value: New raw JSON bytes

        Returns:
            The record after the update

        Raises:
            NotFoundError: If the key is absent
            UpdateOperationFailed: If the engine fails otherwise
        """
        ...

    def delete(self, key: str) -> Record:
        """Remove a record by key.

        Args:
            key: Primary key of the record

        Returns:
            The removed record

        Raises:
            NotFoundError: If the key is absent
            DeleteOperationFailed: If the engine fails otherwise
        """
        ...
