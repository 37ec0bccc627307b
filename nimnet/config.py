"""
Configuration - Server and client settings.

Sources, lowest priority first:
1. Model defaults
2. A JSON config file. Keys may be snake_case or CamelCase
   (`NimServerAddress` and `nim_server_address` are the same setting)
3. NIMNET_* environment variables (NIMNET_NIM_SERVER_ADDRESS, ...)
4. Explicit overrides, usually from the command line

Any failure is a ConfigError; the CLI exits on it.
"""

from __future__ import annotations
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Optional
import json
import logging
import os
import re

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "NIMNET_"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def parse_address(value: str) -> tuple[str, int]:
    """
    Parse "host:port" into a socket address.

    Raises:
        ConfigError: if the value is not host:port with a valid port
    """
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"invalid address {value!r}, expected host:port")
    port_number = int(port)
    if port_number > 65535:
        raise ConfigError(f"invalid port in address {value!r}")
    return host or "0.0.0.0", port_number


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _validate_address(value: str) -> str:
    try:
        parse_address(value)
    except ConfigError as e:
        raise ValueError(str(e)) from e
    return value


AddressStr = Annotated[str, AfterValidator(_validate_address)]


class _BaseConfig(BaseModel):
    """Shared loading logic."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    tracing_server_address: Optional[str] = None
    tracing_identity: str = "nimnet"
    secret: Optional[str] = None

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ):
        """
        Build a config from file, environment and overrides.

        Args:
            path: Optional JSON config file
            env: Environment mapping (defaults to os.environ)
            overrides: Highest-priority values; None entries are ignored

        Raises:
            ConfigError: if a source cannot be read or a value is invalid
        """
        values: dict[str, Any] = {}
        fields = cls.model_fields

        if path is not None:
            for key, value in _read_json(path).items():
                name = _snake_case(key)
                if name in fields:
                    values[name] = value
                else:
                    logger.warning("Ignoring unknown config key %r in %s", key, path)

        env = os.environ if env is None else env
        for name in fields:
            env_key = ENV_PREFIX + name.upper()
            if env_key in env:
                values[name] = env[env_key]

        for name, value in (overrides or {}).items():
            if value is not None:
                values[name] = value

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"invalid {cls.__name__}: {e}") from e


def _read_json(path: str | Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"cannot parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    return data


class ServerConfig(_BaseConfig):
    """Settings for `nimnet server`."""
    nim_server_address: AddressStr = "0.0.0.0:8080"
    tracing_identity: str = "server"

    session_ttl: float = Field(300.0, gt=0, description="Idle seconds before an in-play session expires")
    finished_ttl: float = Field(30.0, gt=0, description="Idle seconds before a finished session expires")
    sweep_interval: float = Field(10.0, ge=0, description="Minimum seconds between expiry sweeps")
    buffer_size: int = Field(1024, ge=64)

    loss_rate: float = Field(0.0, ge=0.0, le=1.0)
    duplicate_rate: float = Field(0.0, ge=0.0, le=1.0)
    delay: float = Field(0.0, ge=0.0)

    api_address: Optional[AddressStr] = Field(None, description="host:port for the HTTP inspection API")

    @property
    def server_address(self) -> tuple[str, int]:
        return parse_address(self.nim_server_address)


class ClientConfig(_BaseConfig):
    """Settings for `nimnet client`."""
    client_address: AddressStr = "0.0.0.0:0"
    nim_server_address: AddressStr = "127.0.0.1:8080"
    tracing_identity: str = "client"

    timeout: float = Field(1.0, gt=0)
    max_attempts: Optional[int] = Field(None, ge=1)
    strategy: Literal["optimal", "naive"] = "optimal"
    buffer_size: int = Field(1024, ge=64)

    @property
    def server_address(self) -> tuple[str, int]:
        return parse_address(self.nim_server_address)

    @property
    def local_address(self) -> tuple[str, int]:
        return parse_address(self.client_address)
