"""API middleware components.

This module exports the error handlers and the correlation ID middleware.
"""

from kvstorage.api.middleware.correlation import CorrelationIdMiddleware
from kvstorage.api.middleware.error_handler import setup_error_handlers

__all__ = ["CorrelationIdMiddleware", "setup_error_handlers"]
