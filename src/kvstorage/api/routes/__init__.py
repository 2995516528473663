"""API route handlers for the key-value service."""

from kvstorage.api.routes.health import router as health_router
from kvstorage.api.routes.kv import router as kv_router

__all__ = ["health_router", "kv_router"]
