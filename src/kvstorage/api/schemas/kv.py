"""Request and response schemas for the key-value API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class KVCreateRequest(BaseModel):
    """Body of ``POST /kv``.

    Attributes:
        key: Key of the new record
        value: Arbitrary JSON value
    """

    key: str = Field(..., min_length=1, description="Key of the new record")
    value: Any = Field(..., description="Arbitrary JSON value")


class KVUpdateRequest(BaseModel):
    """Body of ``PUT /kv/{id}``; ``value`` must be the only field."""

    model_config = ConfigDict(extra="forbid")

    value: Any = Field(..., description="Replacement JSON value")


class KVWriteResponse(BaseModel):
    """Response to a create or update.

    Attributes:
        message: ``created`` or ``updated``
        key: Key that was written
        size: Byte length of the stored value
    """

    message: str
    key: str
    size: int


class KVReadResponse(BaseModel):
    """Response to a read."""

    key: str
    value: Any


class KVDeleteResponse(BaseModel):
    """Response to a delete, carrying the removed value."""

    message: str = "deleted"
    key: str
    value: Any


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    code: str
    message: str
