"""Application configuration models and loading.

Configuration is read from an optional YAML file (``CONFIG_PATH``) and then
overridden by environment variables, including those found in a ``.env``
file in the working directory.
"""

import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


class AppConfig(BaseModel):
    """General application settings.

    Attributes:
        environment: Deployment environment (development or production)
        name: Application name reported by the API
        version: Application version reported by the API
        log_level: Logging level name
    """

    model_config = ConfigDict(frozen=True)

    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )
    name: str = Field(default="kvstorage", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def json_logs(self) -> bool:
        """Whether logs are rendered as JSON."""
        return self.environment == "production"


class HTTPServerConfig(BaseModel):
    """HTTP listener settings."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class StorageConfig(BaseModel):
    """Storage engine connection settings.

    Attributes:
        backend: ``tarantool`` for the real engine, ``memory`` for a local dict
        address: Engine address as ``host:port``
        username: Engine user
        password: Engine password (sensitive - not logged)
        connect_timeout: Bound on the initial connection attempt, in seconds
        socket_timeout: Per-request socket timeout, in seconds
        drain_timeout: Time to wait for in-flight requests on close, in seconds
        space: Name of the key-value space
    """

    model_config = ConfigDict(frozen=True)

    backend: Literal["tarantool", "memory"] = Field(default="tarantool")
    address: str = Field(default="localhost:3301", description="Engine host:port")
    username: str = Field(default="guest", description="Engine user")
    password: str = Field(default="", repr=False, description="Engine password (sensitive)")
    connect_timeout: float = Field(default=1.0, gt=0, le=60)
    socket_timeout: Optional[float] = Field(default=None, gt=0)
    drain_timeout: float = Field(default=5.0, ge=0)
    space: str = Field(default="kv_storage", min_length=1)

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: str) -> str:
        """Validate the address has a host and a numeric port.

        Raises:
            ValueError: If the address is not ``host:port``
        """
        parse_address(value)
        return value

    @property
    def host(self) -> str:
        return parse_address(self.address)[0]

    @property
    def port(self) -> int:
        return parse_address(self.address)[1]


class Settings(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(frozen=True)

    app: AppConfig = Field(default_factory=AppConfig)
    http_server: HTTPServerConfig = Field(default_factory=HTTPServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts.

    Args:
        address: Address string, e.g. ``tarantool-storage:3301``

    Returns:
        Tuple of host and port

    Raises:
        ValueError: If the address is malformed
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"address must be host:port, got '{address}'")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"port out of range in '{address}'")
    return host, port_number


# Environment variable -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "APP_ENV": ("app", "environment"),
    "APP_NAME": ("app", "name"),
    "APP_VERSION": ("app", "version"),
    "LOG_LEVEL": ("app", "log_level"),
    "HTTP_HOST": ("http_server", "host"),
    "HTTP_PORT": ("http_server", "port"),
    "KV_BACKEND": ("storage", "backend"),
    "TT_URI": ("storage", "address"),
    "TT_USER": ("storage", "username"),
    "TT_PASSWORD": ("storage", "password"),
    "TT_CONNECT_TIMEOUT": ("storage", "connect_timeout"),
    "TT_SOCKET_TIMEOUT": ("storage", "socket_timeout"),
}


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Config file does not exist: '{config_path}'")
    if config_path.is_dir():
        raise ConfigError(f"Config path '{config_path}' is a directory, not a file")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse config file '{config_path}': {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a mapping")
    return raw


def load_config(config_path: Optional[str] = None) -> Settings:
    """Load configuration from a YAML file and environment variables.

    Automatically loads variables from a .env file if present.

    Priority (highest to lowest):
    1. Environment variables (``APP_ENV``, ``HTTP_PORT``, ``TT_URI``,
       ``TT_USER``, ``TT_PASSWORD``, ``TT_CONNECT_TIMEOUT``, ...)
    2. YAML file given by ``config_path`` or the ``CONFIG_PATH`` variable
    3. Model defaults

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Validated settings

    Raises:
        ConfigError: If the file is unreadable or a value is invalid

    Example:
        >>> os.environ["TT_URI"] = "tarantool-storage:3301"
        >>> settings = load_config()
        >>> settings.storage.port
        3301
    """
    load_dotenv()

    path = config_path or os.getenv("CONFIG_PATH")
    data: dict[str, Any] = _read_yaml(Path(path)) if path else {}

    for env_var, (section, field) in _ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is None or value == "":
            continue
        section_data = data.get(section) or {}
        if not isinstance(section_data, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        section_data[field] = value
        data[section] = section_data

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
