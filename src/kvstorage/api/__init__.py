"""Key-value HTTP API.

This module provides the FastAPI application and route handlers.
"""

from kvstorage.api.app import app, create_app

__all__ = ["app", "create_app"]
