"""Main CLI entry point for kvstorage.

Provides commands to run the HTTP service and to probe the storage engine.
"""

import sys
from typing import Optional

import click
from tarantool.error import Error as TarantoolError

from kvstorage.config import ConfigError, load_config
from kvstorage.observability.logging import setup_logging
from kvstorage.storage.connection import open_connection
from kvstorage.storage.errors import ConnectionFailedError


def _load(config_path: Optional[str]):
    try:
        return load_config(config_path)
    except ConfigError as e:
        click.echo(f"Could not read config: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="kvstorage")
def cli() -> None:
    """kvstorage - key-value store over HTTP backed by Tarantool."""
    pass


@cli.command()
@click.option("--config", "config_path", type=click.Path(), help="Path to YAML config file")
@click.option("--host", default=None, help="Bind address (overrides config)")
@click.option("--port", default=None, type=int, help="Bind port (overrides config)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(
    config_path: Optional[str], host: Optional[str], port: Optional[int], reload: bool
) -> None:
    """Run the HTTP API server."""
    import uvicorn

    from kvstorage.api.app import create_app

    settings = _load(config_path)

    if reload:
        # uvicorn needs an import string to reload; settings are re-read on startup
        uvicorn.run(
            "kvstorage.api.app:app",
            host=host or settings.http_server.host,
            port=port or settings.http_server.port,
            reload=True,
            log_config=None,
        )
        return

    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.http_server.host,
        port=port or settings.http_server.port,
        log_config=None,
    )


@cli.command()
@click.option("--config", "config_path", type=click.Path(), help="Path to YAML config file")
def check(config_path: Optional[str]) -> None:
    """Connect to the storage engine, ping it and disconnect."""
    settings = _load(config_path)
    setup_logging(log_level=settings.app.log_level, json_logs=settings.app.json_logs)

    if settings.storage.backend == "memory":
        click.echo("In-memory backend configured; nothing to check")
        return

    try:
        with open_connection(settings.storage) as connection:
            connection.ping()
    except ConnectionFailedError as e:
        click.echo(f"Storage check failed: {e.message}", err=True)
        sys.exit(1)
    except TarantoolError as e:
        click.echo(f"Storage check failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Storage at {settings.storage.address} is reachable")


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
