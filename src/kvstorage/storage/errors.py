"""Storage error taxonomy.

Every failure raised by the storage layer is a ``StorageError`` carrying an
``ErrorKind``. Callers dispatch on ``exc.kind`` rather than on identity.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed set of storage error kinds."""

    CONNECTION_FAILED = "connection_failed"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    INSERT_FAILED = "insert_failed"
    SELECT_FAILED = "select_failed"
    UPDATE_FAILED = "update_failed"
    DELETE_FAILED = "delete_failed"
    MALFORMED_RECORD = "malformed_record"


class StorageError(Exception):
    """Base exception for all storage-layer errors.

    Attributes:
        kind: Error kind used for dispatch
        message: Human-readable error message
    """

    kind: ErrorKind
    default_message: str = "storage error"

    def __init__(self, message: Optional[str] = None) -> None:
        """Initialize storage error.

        Args:
            message: Optional override of the kind's default message
        """
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        """Machine-readable error code."""
        return self.kind.value


class ConnectionFailedError(StorageError):
    """Raised when the session to the storage engine cannot be established."""

    kind = ErrorKind.CONNECTION_FAILED
    default_message = "storage connection failed"


class AlreadyExistsError(StorageError):
    """Raised when an insert targets a key that is already present."""

    kind = ErrorKind.ALREADY_EXISTS
    default_message = "key already exists"


class NotFoundError(StorageError):
    """Raised when a select, update or delete targets an absent key."""

    kind = ErrorKind.NOT_FOUND
    default_message = "key not found"


class InsertOperationFailed(StorageError):
    """Raised when an insert fails for any reason other than a duplicate key."""

    kind = ErrorKind.INSERT_FAILED
    default_message = "insert operation failed"


class SelectOperationFailed(StorageError):
    """Raised when a select reply cannot be decoded into a record."""

    kind = ErrorKind.SELECT_FAILED
    default_message = "select operation failed"


class UpdateOperationFailed(StorageError):
    """Raised when an update fails in transport or its reply cannot be decoded."""

    kind = ErrorKind.UPDATE_FAILED
    default_message = "update operation failed"


class DeleteOperationFailed(StorageError):
    """Raised when a delete fails in transport or its reply cannot be decoded."""

    kind = ErrorKind.DELETE_FAILED
    default_message = "delete operation failed"


class MalformedRecordError(StorageError):
    """Raised when a tuple does not have the ``[key, value]`` shape."""

    kind = ErrorKind.MALFORMED_RECORD
    default_message = "malformed record"
