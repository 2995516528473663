"""API request and response schemas."""

from kvstorage.api.schemas.kv import (
    ErrorResponse,
    KVCreateRequest,
    KVDeleteResponse,
    KVReadResponse,
    KVUpdateRequest,
    KVWriteResponse,
)

__all__ = [
    "KVCreateRequest",
    "KVUpdateRequest",
    "KVWriteResponse",
    "KVReadResponse",
    "KVDeleteResponse",
    "ErrorResponse",
]
