"""FastAPI application factory for the key-value service.

This module provides the application factory pattern for creating
configured FastAPI instances with middleware, routes, error handlers and the
storage connection lifecycle.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from kvstorage.api.middleware.correlation import CorrelationIdMiddleware
from kvstorage.api.middleware.error_handler import setup_error_handlers
from kvstorage.api.routes.health import router as health_router
from kvstorage.api.routes.kv import router as kv_router
from kvstorage.config import Settings, load_config
from kvstorage.observability.logging import get_logger, setup_logging
from kvstorage.storage.base import KVRepository
from kvstorage.storage.connection import ConnectionManager
from kvstorage.storage.memory import InMemoryKVRepository
from kvstorage.storage.tarantool_repository import TarantoolKVRepository
from kvstorage.usecase.crud import KVService

logger = get_logger(__name__)


def _build_lifespan(settings: Optional[Settings], repository: Optional[KVRepository]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifespan events.

        Opens the storage connection on startup and closes it on shutdown. A
        failed connection aborts startup.

        Args:
            app: FastAPI application instance

        Yields:
            None during application runtime
        """
        resolved = settings or load_config()
        setup_logging(log_level=resolved.app.log_level, json_logs=resolved.app.json_logs)

        connection: Optional[ConnectionManager] = None
        if repository is not None:
            repo: KVRepository = repository
        elif resolved.storage.backend == "memory":
            logger.info("storage_backend_selected", backend="memory")
            repo = InMemoryKVRepository()
        else:
            logger.info(
                "storage_backend_selected",
                backend="tarantool",
                address=resolved.storage.address,
                space=resolved.storage.space,
            )
            connection = ConnectionManager.from_config(resolved.storage)
            await run_in_threadpool(connection.connect)
            repo = TarantoolKVRepository(connection, space=resolved.storage.space)

        app.state.settings = resolved
        app.state.connection = connection
        app.state.kv_service = KVService(repo)

        logger.info("application_started", name=resolved.app.name, version=resolved.app.version)

        try:
            yield
        finally:
            logger.info("application_stopping")
            app.state.kv_service = None
            if connection is not None:
                await run_in_threadpool(connection.close)
            logger.info("application_stopped")

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[KVRepository] = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Configuration; loaded from YAML/environment on startup if omitted
        repository: Optional repository to use instead of opening a connection

    Returns:
        Configured FastAPI application instance

    Examples:
        >>> app = create_app()
        >>> # uvicorn kvstorage.api.app:app
    """
    app_config = settings.app if settings is not None else None

    app = FastAPI(
        title=app_config.name if app_config else "kvstorage",
        version=app_config.version if app_config else "0.1.0",
        description="Key-value store over HTTP backed by Tarantool",
        lifespan=_build_lifespan(settings, repository),
    )

    app.add_middleware(CorrelationIdMiddleware)  # type: ignore[arg-type]

    setup_error_handlers(app)

    app.include_router(kv_router)
    app.include_router(health_router)

    return app


# Module-level app instance for uvicorn
app = create_app()
