"""CRUD use cases over a key-value repository.

Decouples the HTTP routes from the storage backend: validates the key and the
JSON value, then delegates to the repository.
"""

import json
from typing import Any

from kvstorage.observability.logging import get_logger
from kvstorage.storage.base import KVRepository
from kvstorage.storage.models import Record

logger = get_logger(__name__)


class InvalidValueError(ValueError):
    """Raised when a key or value is rejected before reaching storage."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def encode_value(value: Any) -> bytes:
    """Serialize a parsed JSON value into the compact bytes that are stored.

    Args:
        value: Any JSON-compatible value

    Returns:
        Compact UTF-8 JSON bytes

    Raises:
        InvalidValueError: If the value is not JSON-serializable, or holds
            NaN or an infinity
    """
    try:
        return json.dumps(
            value, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidValueError(f"value is not valid JSON: {e}") from e


def decode_value(record: Record) -> Any:
    """Parse the stored bytes of a record back into a JSON value."""
    return json.loads(record.value)


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN, Infinity and -Infinity, which are not JSON
    raise ValueError(f"{name} is not a JSON value")


class KVService:
    """Key-value use cases.

    Example:
        >>> service = KVService(InMemoryKVRepository())
        >>> service.create("user:1", b'{"name":"a"}').size
        12
    """

    def __init__(self, repository: KVRepository) -> None:
        self.repository = repository

    def create(self, key: str, value: bytes) -> Record:
        logger.debug("create_requested", key=key, value=value)
        self._validate(key, value)
        return self.repository.insert(key, value)

    def read(self, key: str) -> Record:
        logger.debug("read_requested", key=key)
        self._validate_key(key)
        return self.repository.select(key)

    def update(self, key: str, value: bytes) -> Record:
        logger.debug("update_requested", key=key, value=value)
        self._validate(key, value)
        return self.repository.update(key, value)

    def delete(self, key: str) -> Record:
        logger.debug("delete_requested", key=key)
        self._validate_key(key)
        return self.repository.delete(key)

    def _validate(self, key: str, value: bytes) -> None:
        self._validate_key(key)
        if not value:
            raise InvalidValueError("missing value")
        try:
            parsed = json.loads(value, parse_constant=_reject_constant)
        except ValueError as e:
            raise InvalidValueError(f"value is not valid JSON: {e}") from e
        if parsed is None:
            raise InvalidValueError("missing value")

    @staticmethod
    def _validate_key(key: str) -> None:
        if not key:
            raise InvalidValueError("missing key")
