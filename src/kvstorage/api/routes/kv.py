"""Key-value API route handlers.

Handlers are synchronous: FastAPI runs each request on its worker thread
pool, and every request shares the one storage session.
"""

from fastapi import APIRouter, Depends, status

from kvstorage.api.dependencies import get_kv_service
from kvstorage.api.schemas.kv import (
    ErrorResponse,
    KVCreateRequest,
    KVDeleteResponse,
    KVReadResponse,
    KVUpdateRequest,
    KVWriteResponse,
)
from kvstorage.observability.logging import get_logger
from kvstorage.usecase.crud import KVService, decode_value, encode_value

logger = get_logger(__name__)

router = APIRouter(prefix="/kv", tags=["kv"])

_errors = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


@router.post(
    "",
    response_model=KVWriteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_errors, 409: {"model": ErrorResponse, "description": "Key already exists"}},
)
def create_kv(
    body: KVCreateRequest,
    service: KVService = Depends(get_kv_service),
) -> KVWriteResponse:
    """Create a new key-value pair.

    Examples:
        >>> POST /kv
        >>> {"key": "user:1", "value": {"name": "a"}}
        >>>
        >>> {"message": "created", "key": "user:1", "size": 12}
    """
    record = service.create(body.key, encode_value(body.value))
    return KVWriteResponse(message="created", key=record.key, size=record.size)


@router.get(
    "/{key}",
    response_model=KVReadResponse,
    responses={**_errors, 404: {"model": ErrorResponse, "description": "Key not found"}},
)
def read_kv(key: str, service: KVService = Depends(get_kv_service)) -> KVReadResponse:
    """Get the value stored under a key."""
    record = service.read(key)
    return KVReadResponse(key=record.key, value=decode_value(record))


@router.put(
    "/{key}",
    response_model=KVWriteResponse,
    responses={**_errors, 404: {"model": ErrorResponse, "description": "Key not found"}},
)
def update_kv(
    key: str,
    body: KVUpdateRequest,
    service: KVService = Depends(get_kv_service),
) -> KVWriteResponse:
    """Replace the value stored under a key.

    The body must be exactly ``{"value": <any JSON>}``.
    """
    value = encode_value(body.value)
    service.update(key, value)
    return KVWriteResponse(message="updated", key=key, size=len(value))


@router.delete(
    "/{key}",
    response_model=KVDeleteResponse,
    responses={**_errors, 404: {"model": ErrorResponse, "description": "Key not found"}},
)
def delete_kv(key: str, service: KVService = Depends(get_kv_service)) -> KVDeleteResponse:
    """Delete a key and report the value it held."""
    record = service.delete(key)
    logger.info("kv_deleted", key=record.key, size=record.size)
    return KVDeleteResponse(key=record.key, value=decode_value(record))
