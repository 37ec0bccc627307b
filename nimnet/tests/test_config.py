"""
Tests for configuration loading.

Tests:
- Defaults
- JSON file with CamelCase or snake_case keys
- Environment and override precedence
- Invalid values raise ConfigError
"""

import json

import pytest

from ..config import ClientConfig, ServerConfig, parse_address
from ..errors import ConfigError


@pytest.fixture
def write_config(tmp_path):
    def write(data, name="config.json"):
        path = tmp_path / name
        path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
        return path
    return write


class TestParseAddress:
    def test_host_and_port(self):
        assert parse_address("127.0.0.1:8080") == ("127.0.0.1", 8080)

    def test_empty_host_means_all_interfaces(self):
        assert parse_address(":9000") == ("0.0.0.0", 9000)

    @pytest.mark.parametrize("value", ["localhost", "host:", "host:port", "host:70000", ""])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            parse_address(value)


class TestServerConfig:
    """Tests for server settings."""

    def test_defaults(self):
        config = ServerConfig.load(env={})
        assert config.server_address == ("0.0.0.0", 8080)
        assert config.tracing_identity == "server"
        assert config.session_ttl == 300.0
        assert config.api_address is None

    def test_camel_case_file(self, write_config):
        path = write_config({
            "NimServerAddress": "127.0.0.1:9001",
            "TracingServerAddress": "127.0.0.1:6000",
            "Secret": "c2VjcmV0",
            "TracingIdentity": "server-a",
        })
        config = ServerConfig.load(path, env={})

        assert config.nim_server_address == "127.0.0.1:9001"
        assert config.tracing_server_address == "127.0.0.1:6000"
        assert config.secret == "c2VjcmV0"
        assert config.tracing_identity == "server-a"

    def test_unknown_keys_ignored(self, write_config):
        path = write_config({"nim_server_address": "0.0.0.0:1", "Colour": "blue"})
        assert ServerConfig.load(path, env={}).server_address == ("0.0.0.0", 1)

    def test_precedence(self, write_config):
        path = write_config({"nim_server_address": "0.0.0.0:1", "session_ttl": 10})
        env = {"NIMNET_NIM_SERVER_ADDRESS": "0.0.0.0:2", "NIMNET_SESSION_TTL": "20.5"}

        config = ServerConfig.load(path, env=env, overrides={"nim_server_address": "0.0.0.0:3"})

        assert config.server_address == ("0.0.0.0", 3)
        assert config.session_ttl == 20.5

    def test_none_overrides_ignored(self):
        config = ServerConfig.load(env={}, overrides={"api_address": None, "loss_rate": None})
        assert config.api_address is None
        assert config.loss_rate == 0.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            ServerConfig.load(tmp_path / "missing.json", env={})

    def test_bad_json(self, write_config):
        with pytest.raises(ConfigError):
            ServerConfig.load(write_config("{not json"), env={})

    def test_non_object_json(self, write_config):
        with pytest.raises(ConfigError):
            ServerConfig.load(write_config("[1, 2]"), env={})

    @pytest.mark.parametrize("overrides", [
        {"nim_server_address": "nowhere"},
        {"api_address": "localhost"},
        {"loss_rate": 1.5},
        {"session_ttl": 0},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigError):
            ServerConfig.load(env={}, overrides=overrides)


class TestClientConfig:
    """Tests for client settings."""

    def test_defaults(self):
        config = ClientConfig.load(env={})
        assert config.server_address == ("127.0.0.1", 8080)
        assert config.local_address == ("0.0.0.0", 0)
        assert config.timeout == 1.0
        assert config.max_attempts is None
        assert config.strategy == "optimal"

    def test_camelcase_client_config_keys(self, write_config):
        path = write_config({
            "ClientAddress": "127.0.0.1:0",
            "NimServerAddress": "127.0.0.1:8080",
            "TracingServerAddress": "127.0.0.1:6000",
            "Secret": None,
            "TracingIdentity": "client1",
        })
        config = ClientConfig.load(path, env={})
        assert config.local_address == ("127.0.0.1", 0)
        assert config.tracing_identity == "client1"

    def test_env_strategy(self):
        config = ClientConfig.load(env={"NIMNET_STRATEGY": "naive", "NIMNET_MAX_ATTEMPTS": "4"})
        assert config.strategy == "naive"
        assert config.max_attempts == 4

    def test_unknown_strategy(self):
        with pytest.raises(ConfigError):
            ClientConfig.load(env={}, overrides={"strategy": "random"})
