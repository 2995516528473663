"""Storage engine connection management.

Owns the single long-lived session to Tarantool. The session is opened once
with a bounded timeout, shared by every request, and closed exactly once on
shutdown after in-flight requests have drained.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import tarantool
from pydantic import BaseModel, ConfigDict, Field
from tarantool.error import Error as TarantoolError

from kvstorage.config import StorageConfig, parse_address
from kvstorage.observability.logging import get_logger
from kvstorage.storage.errors import ConnectionFailedError

logger = get_logger(__name__)


class StorageCredentials(BaseModel):
    """Username and password for the storage engine."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(default="", repr=False)


class ConnectionManager:
    """Owner of the shared Tarantool session.

    Call ``connect()`` once at startup and ``close()`` once at shutdown.
    Repository operations borrow the session through ``acquire()``.

    Example:
        >>> manager = ConnectionManager("localhost:3301", StorageCredentials(username="guest"))
        >>> manager.connect()
        >>> with manager.acquire() as session:
        ...     session.ping()
        >>> manager.close()
    """

    def __init__(
        self,
        address: str,
        credentials: StorageCredentials,
        timeout: float = 1.0,
        socket_timeout: Optional[float] = None,
        drain_timeout: float = 5.0,
    ) -> None:
        self.address = address
        self.credentials = credentials
        self.timeout = timeout
        self.socket_timeout = socket_timeout
        self.drain_timeout = drain_timeout

        self._session: Optional[tarantool.Connection] = None
        self._closed = False
        self._in_flight = 0
        self._state = threading.Condition()

    @classmethod
    def from_config(cls, config: StorageConfig) -> "ConnectionManager":
        """Build an unconnected manager from storage settings."""
        return cls(
            address=config.address,
            credentials=StorageCredentials(username=config.username, password=config.password),
            timeout=config.connect_timeout,
            socket_timeout=config.socket_timeout,
            drain_timeout=config.drain_timeout,
        )

    @property
    def is_connected(self) -> bool:
        """Whether the session is open and not yet closed."""
        return self._session is not None and not self._closed

    def connect(self) -> None:
        """Open the session with a single attempt bounded by ``timeout``.

        Raises:
            ConnectionFailedError: If the address is invalid, the engine is
                unreachable or authentication fails
        """
        if self._closed:
            raise ConnectionFailedError("connection manager already closed")
        if self._session is not None:
            return

        try:
            host, port = parse_address(self.address)
        except ValueError as exc:
            raise ConnectionFailedError(str(exc)) from exc

        try:
            self._session = tarantool.Connection(
                host,
                port,
                user=self.credentials.username,
                password=self.credentials.password,
                socket_timeout=self.socket_timeout,
                connection_timeout=self.timeout,
                reconnect_max_attempts=0,
                connect_now=True,
            )
        except (TarantoolError, OSError) as exc:
            logger.error("storage_connect_failed", address=self.address, error=str(exc))
            raise ConnectionFailedError(
                f"could not connect to storage at '{self.address}': {exc}"
            ) from exc

        logger.info("storage_connected", address=self.address, user=self.credentials.username)

    @contextmanager
    def acquire(self) -> Iterator[tarantool.Connection]:
        """Borrow the session for one request.

        Yields:
            The live engine session

        Raises:
            ConnectionFailedError: If the session is not open
        """
        with self._state:
            if self._session is None or self._closed:
                raise ConnectionFailedError("storage connection is not open")
            session = self._session
            self._in_flight += 1
        try:
            yield session
        finally:
            with self._state:
                self._in_flight -= 1
                self._state.notify_all()

    def ping(self) -> bool:
        """Check that the engine answers.

        Returns:
            True if the engine responded to a ping

        Raises:
            ConnectionFailedError: If the session is not open
        """
        with self.acquire() as session:
            session.ping(notime=True)
        return True

    def close(self) -> None:
        """Close the session gracefully.

        Waits up to ``drain_timeout`` seconds for in-flight requests before
        closing the socket. Errors are logged, never raised. Calls after the
        first are ignored.
        """
        with self._state:
            if self._closed:
                return
            self._closed = True
            drained = self._state.wait_for(lambda: self._in_flight == 0, self.drain_timeout)
            session, self._session = self._session, None

        if not drained:
            logger.warning("storage_close_drain_timeout", in_flight=self._in_flight)
        if session is None:
            return

        try:
            session.close()
        except Exception as exc:
            logger.warning("storage_close_failed", address=self.address, error=str(exc))
        else:
            logger.info("storage_connection_closed", address=self.address)

    def __enter__(self) -> "ConnectionManager":
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def connect(address: str, credentials: StorageCredentials, timeout: float) -> ConnectionManager:
    """Open a session to the engine.

    Args:
        address: Engine address as ``host:port``
        credentials: Engine username and password
        timeout: Bound on the connection attempt, in seconds

    Returns:
        Connected manager

    Raises:
        ConnectionFailedError: If the session cannot be established
    """
    manager = ConnectionManager(address, credentials, timeout=timeout)
    manager.connect()
    return manager


@contextmanager
def open_connection(config: StorageConfig) -> Iterator[ConnectionManager]:
    """Open a connection for the duration of a ``with`` block.

    Args:
        config: Storage settings

    Yields:
        Connected manager, closed on exit
    """
    with ConnectionManager.from_config(config) as manager:
        yield manager
