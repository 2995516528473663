"""Observability for kvstorage: structured logging with correlation IDs."""

from kvstorage.observability.logging import get_logger, setup_logging

__all__ = ["setup_logging", "get_logger"]
