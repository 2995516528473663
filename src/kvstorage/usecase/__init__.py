"""Use-case layer between the HTTP API and the storage backends."""

from kvstorage.usecase.crud import InvalidValueError, KVService, decode_value, encode_value

__all__ = ["KVService", "InvalidValueError", "encode_value", "decode_value"]
