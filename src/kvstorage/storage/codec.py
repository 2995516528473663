"""MessagePack codec for ``kv_storage`` tuples.

A record travels as a two-element array ``[key, value]``: the key is packed
as ``str`` and the value as ``bin`` so the JSON payload is carried verbatim.

``encode``/``decode`` define that wire format on raw bytes. The repository
hands tuples to the Tarantool client, which does its own packing, so it goes
through ``to_tuple``/``from_tuple`` instead; ``decode`` validates the fields it
unpacks with ``from_tuple``, so both paths accept and reject the same tuples.
Only ``decode`` sees raw bytes and can reject trailing data.
"""

from typing import Any, Sequence

import msgpack

from kvstorage.storage.errors import MalformedRecordError
from kvstorage.storage.models import Record

TUPLE_LENGTH = 2
KEY_FIELD = 0
VALUE_FIELD = 1


def encode(record: Record) -> bytes:
    """Pack a record into its wire tuple.

    Args:
        record: Record to pack

    Returns:
        MessagePack bytes of ``[key, value]``
    """
    packer = msgpack.Packer(use_bin_type=True)
    key, value = to_tuple(record)
    return packer.pack_array_header(TUPLE_LENGTH) + packer.pack(key) + packer.pack(value)


def decode(data: bytes) -> Record:
    """Unpack a wire tuple into a record.

    Args:
        data: MessagePack bytes holding exactly one tuple

    Returns:
        Decoded record

    Raises:
        MalformedRecordError: If the bytes do not hold a ``[str, bytes]`` array
    """
    unpacker = msgpack.Unpacker(raw=False)
    unpacker.feed(data)

    try:
        length = unpacker.read_array_header()
    except (msgpack.UnpackException, ValueError) as exc:
        raise MalformedRecordError(f"tuple header unreadable: {exc}") from exc

    if length != TUPLE_LENGTH:
        raise MalformedRecordError(f"array len doesn't match: {length}")

    try:
        key = unpacker.unpack()
        value = unpacker.unpack()
    except (msgpack.UnpackException, ValueError) as exc:
        raise MalformedRecordError(f"tuple body unreadable: {exc}") from exc

    if unpacker.tell() != len(data):
        raise MalformedRecordError("trailing bytes after tuple")

    return from_tuple([key, value])


def to_tuple(record: Record) -> list[Any]:
    """Build the tuple handed to the engine client."""
    return [record.key, bytes(record.value)]


def from_tuple(fields: Sequence[Any]) -> Record:
    """Build a record from a tuple unpacked by the engine client.

    Args:
        fields: Tuple fields as returned in a response body

    Returns:
        Decoded record

    Raises:
        MalformedRecordError: If the tuple is not a ``[str, bytes]`` pair
    """
    if isinstance(fields, (str, bytes)) or not isinstance(fields, Sequence):
        raise MalformedRecordError(f"expected a tuple, got {type(fields).__name__}")
    if len(fields) != TUPLE_LENGTH:
        raise MalformedRecordError(f"array len doesn't match: {len(fields)}")
    return Record(key=_decode_key(fields[KEY_FIELD]), value=_decode_value(fields[VALUE_FIELD]))


def _decode_key(key: Any) -> str:
    if not isinstance(key, str):
        raise MalformedRecordError(f"key must be a string, got {type(key).__name__}")
    return key


def _decode_value(value: Any) -> bytes:
    # Values written by other clients may arrive as str rather than bin.
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise MalformedRecordError(f"value must be a byte string, got {type(value).__name__}")
