"""FastAPI dependencies exposing application-scoped resources to routes.

The lifespan handler stores the service and the connection manager on
``app.state``; these functions hand them to route handlers.
"""

from typing import Optional

from fastapi import Request

from kvstorage.storage.connection import ConnectionManager
from kvstorage.usecase.crud import KVService


def get_kv_service(request: Request) -> KVService:
    """Get the key-value service for the running application.

    Args:
        request: FastAPI request object

    Returns:
        Service created at startup

    Raises:
        RuntimeError: If the application has not finished starting
    """
    service: Optional[KVService] = getattr(request.app.state, "kv_service", None)
    if service is None:
        raise RuntimeError("Key-value service is not initialized")
    return service


def get_connection(request: Request) -> Optional[ConnectionManager]:
    """Get the storage connection manager, or None for the in-memory backend."""
    return getattr(request.app.state, "connection", None)
