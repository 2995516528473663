"""Tarantool-backed key-value repository.

Translates CRUD calls into IPROTO requests against the ``kv_storage`` space
and classifies the engine's answers into records or ``StorageError``s.
"""

from typing import Any, Optional

from tarantool.error import DatabaseError, NetworkError
from tarantool.error import Error as TarantoolError

from kvstorage.observability.logging import get_logger
from kvstorage.storage import codec
from kvstorage.storage.connection import ConnectionManager
from kvstorage.storage.errors import (
    AlreadyExistsError,
    DeleteOperationFailed,
    InsertOperationFailed,
    MalformedRecordError,
    NotFoundError,
    SelectOperationFailed,
    StorageError,
    UpdateOperationFailed,
)
from kvstorage.storage.models import Record

logger = get_logger(__name__)

DEFAULT_SPACE = "kv_storage"
PRIMARY_INDEX = 0

# IPROTO error code for a duplicate primary key
ER_TUPLE_FOUND = 3


def _error_code(error: BaseException) -> Optional[int]:
    code = getattr(error, "code", None)
    if isinstance(code, int):
        return code
    if error.args and isinstance(error.args[0], int):
        return error.args[0]
    return None


def classify_insert_outcome(response: Any, error: Optional[BaseException]) -> None:
    """Classify the outcome of an insert from the response header.

    On a conflict the engine returns no tuple, so the decision is taken from
    the header's error code rather than from a decoded body.

    Args:
        response: Engine response, or None if the request raised
        error: Exception raised by the request, if any

    Raises:
        AlreadyExistsError: If the engine reported a duplicate key
        InsertOperationFailed: For any other failure
    """
    if error is None:
        return_code = getattr(response, "return_code", 0)
        if response is not None and return_code == 0:
            return
        error = DatabaseError(return_code, getattr(response, "return_message", ""))

    if isinstance(error, DatabaseError) and not isinstance(error, NetworkError):
        if _error_code(error) == ER_TUPLE_FOUND:
            raise AlreadyExistsError()

    raise InsertOperationFailed(f"insert operation failed: {error}")


def _decode_tuples(data: Any) -> list[Record]:
    return [codec.from_tuple(fields) for fields in (data or [])]


class TarantoolKVRepository:
    """Key-value repository over a Tarantool space.

    The repository borrows the shared session from a ``ConnectionManager``
    for each call and adds no locking of its own.

    Attributes:
        space: Name of the key-value space
    """

    def __init__(self, connection: ConnectionManager, space: str = DEFAULT_SPACE) -> None:
        """Initialize the repository.

        Args:
            connection: Connected manager owning the engine session
            space: Name of the key-value space (default: kv_storage)
        """
        self._connection = connection
        self.space = space

    def insert(self, key: str, value: bytes) -> Record:
        """Insert a new record, see ``KVRepository.insert``."""
        record = Record(key=key, value=value)
        logger.debug("insert_requested", key=key, value=value)

        response = None
        error: Optional[BaseException] = None
        with self._connection.acquire() as session:
            try:
                response = session.insert(self.space, codec.to_tuple(record))
            except TarantoolError as exc:
                error = exc

        try:
            classify_insert_outcome(response, error)
        except AlreadyExistsError:
            logger.debug("insert_conflict", key=key, value=value)
            raise
        except StorageError:
            logger.debug("insert_failed", key=key, value=value, error=str(error), exc_info=error)
            raise

        logger.debug("insert_completed", key=key, value=value)
        return record

    def select(self, key: str) -> Record:
        """Select a record by key, see ``KVRepository.select``.

        Transport errors raised before decoding propagate unchanged.
        """
        logger.debug("select_requested", key=key)

        with self._connection.acquire() as session:
            response = session.select(self.space, key, index=PRIMARY_INDEX)

        try:
            records = _decode_tuples(response.data)
        except MalformedRecordError as exc:
            logger.debug("select_decode_failed", key=key, error=exc.message)
            raise SelectOperationFailed(f"select operation failed: {exc.message}") from exc

        if not records:
            logger.debug("select_not_found", key=key)
            raise NotFoundError()

        record = records[0]
        logger.debug("select_completed", key=record.key, value=record.value)
        return record

    def update(self, key: str, value: bytes) -> Record:
        """Assign a new value to an existing key, see ``KVRepository.update``."""
        logger.debug("update_requested", key=key, value=value)

        operations = [("=", codec.VALUE_FIELD, bytes(value))]
        try:
            with self._connection.acquire() as session:
                response = session.update(self.space, key, operations)
            records = _decode_tuples(response.data)
        except (TarantoolError, MalformedRecordError) as exc:
            logger.debug("update_failed", key=key, value=value, error=str(exc), exc_info=exc)
            raise UpdateOperationFailed(f"update operation failed: {exc}") from exc

        if not records:
            logger.debug("update_not_found", key=key, value=value)
            raise NotFoundError()

        record = records[0]
        logger.debug("update_completed", key=record.key, value=record.value)
        return record

    def delete(self, key: str) -> Record:
        """Delete a record by key, see ``KVRepository.delete``."""
        logger.debug("delete_requested", key=key)

        try:
            with self._connection.acquire() as session:
                response = session.delete(self.space, key)
            records = _decode_tuples(response.data)
        except (TarantoolError, MalformedRecordError) as exc:
            logger.debug("delete_failed", key=key, error=str(exc), exc_info=exc)
            raise DeleteOperationFailed(f"delete operation failed: {exc}") from exc

        if not records:
            logger.debug("delete_not_found", key=key)
            raise NotFoundError()

        record = records[0]
        logger.debug("delete_completed", key=record.key, value=record.value)
        return record
