"""Liveness endpoint reporting whether the storage engine answers a ping."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from kvstorage.api.dependencies import get_connection
from kvstorage.observability.logging import get_logger
from kvstorage.storage.connection import ConnectionManager
from kvstorage.storage.errors import StorageError

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckComponent(BaseModel):
    """Result of probing one dependency (``healthy`` or ``unhealthy``)."""

    status: str
    message: str | None = None


class HealthCheckResponse(BaseModel):
    """Body of ``GET /health``.

    Attributes:
        status: ``healthy`` when every component is healthy
        components: Probe result per dependency, keyed by name
        version: Version reported by the running application
    """

    status: str
    components: dict[str, HealthCheckComponent]
    version: str


def check_storage_health(connection: Optional[ConnectionManager]) -> HealthCheckComponent:
    """Ping the storage engine.

    Args:
        connection: Connection manager, or None for the in-memory backend

    Returns:
        HealthCheckComponent with storage status
    """
    if connection is None:
        return HealthCheckComponent(status="healthy", message="In-memory storage")

    try:
        connection.ping()
    except StorageError as e:
        logger.error("storage_health_check_failed", error=e.message)
        return HealthCheckComponent(status="unhealthy", message=e.message)
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        return HealthCheckComponent(status="unhealthy", message=f"Storage error: {e}")

    return HealthCheckComponent(status="healthy", message="Storage connection successful")


@router.get("/health", response_model=HealthCheckResponse)
def health_check(
    request: Request,
    connection: Optional[ConnectionManager] = Depends(get_connection),
) -> JSONResponse:
    """Health check endpoint.

    Returns:
        200 OK if storage is reachable, 503 Service Unavailable otherwise

    Example:
        >>> GET /health
        >>> {
        ...     "status": "healthy",
        ...     "components": {"storage": {"status": "healthy", "message": "..."}},
        ...     "version": "0.1.0"
        ... }
    """
    storage_health = check_storage_health(connection)
    healthy = storage_health.status == "healthy"

    response = HealthCheckResponse(
        status="healthy" if healthy else "unhealthy",
        components={"storage": storage_health},
        version=getattr(request.app, "version", "0.1.0"),
    )

    logger.debug("health_check_completed", status=response.status)

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(),
    )
