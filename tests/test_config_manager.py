"""
Unit tests for noodleseed_mcp.config.manager module

Tests configuration loading, validation, and environment variable handling.
"""

import pytest

from noodleseed_mcp.config.manager import (
    CatalogConfig,
    ConfigManager,
    ServerConfig,
    TransportConfig,
    get_config,
    init_config
)

NO_ENV_FILE = "/nonexistent/.env"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in ("HOST", "PORT", "DEBUG_MODE", "LOG_LEVEL", "LOG_FILE", "MAX_MESSAGE_SIZE",
                "SSE_PATH", "POST_PATH", "HEALTH_PATH", "HEARTBEAT_INTERVAL",
                "CORS_ORIGIN", "WIDGET_ASSETS_DIR"):
        monkeypatch.delenv(key, raising=False)


class TestConfigDataClasses:
    """Test configuration dataclass creation"""

    def test_server_config_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8000
        assert config.debug_mode is False
        assert config.log_level == "INFO"
        assert config.max_message_size == 1024 * 1024

    def test_transport_config_defaults(self):
        config = TransportConfig()

        assert config.sse_path == "/mcp"
        assert config.post_path == "/mcp/messages"
        assert config.health_path == "/health"
        assert config.session_header == "Mcp-Session-Id"
        assert config.heartbeat_interval == 15.0
        assert config.cors_origin == "*"

    def test_catalog_config_defaults(self):
        assert CatalogConfig().assets_dir == "dist"


class TestEnvironmentVariables:
    """Test environment variable overrides"""

    def test_env_variable_override(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("HEARTBEAT_INTERVAL", "2.5")
        monkeypatch.setenv("WIDGET_ASSETS_DIR", "/srv/widgets")

        manager = ConfigManager(env_file_path=NO_ENV_FILE)

        assert manager.server.port == 9000
        assert manager.server.host == "127.0.0.1"
        assert manager.transport.heartbeat_interval == 2.5
        assert manager.catalog.assets_dir == "/srv/widgets"

    def test_boolean_env_variables(self, monkeypatch):
        monkeypatch.setenv("DEBUG_MODE", "yes")

        manager = ConfigManager(env_file_path=NO_ENV_FILE)

        assert manager.server.debug_mode is True

    def test_invalid_integer_falls_back_to_default(self, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-port")

        manager = ConfigManager(env_file_path=NO_ENV_FILE)

        assert manager.server.port == 8000


class TestEnvFileLoading:
    """Test .env file loading"""

    def test_load_from_env_file(self, monkeypatch, tmp_path):
        # Registered with monkeypatch so the values loaded below are undone afterwards
        monkeypatch.setenv("PORT", "8000")
        monkeypatch.setenv("CORS_ORIGIN", "*")

        env_file = tmp_path / ".env"
        env_file.write_text(
            "# local overrides\n"
            "\n"
            "PORT=7777\n"
            "CORS_ORIGIN=https://chat.example.com\n"
        )

        manager = ConfigManager(env_file_path=str(env_file))

        assert manager.server.port == 7777
        assert manager.transport.cors_origin == "https://chat.example.com"


class TestConfigValidation:
    """Test configuration validation"""

    def test_valid_configuration_passes(self):
        manager = ConfigManager(env_file_path=NO_ENV_FILE)
        assert manager is not None

    def test_invalid_port_range(self, monkeypatch):
        monkeypatch.setenv("PORT", "70000")

        with pytest.raises(ValueError, match="port must be between"):
            ConfigManager(env_file_path=NO_ENV_FILE)

    def test_negative_heartbeat(self, monkeypatch):
        monkeypatch.setenv("HEARTBEAT_INTERVAL", "-1")

        with pytest.raises(ValueError, match="heartbeat_interval"):
            ConfigManager(env_file_path=NO_ENV_FILE)

    def test_paths_must_differ(self, monkeypatch):
        monkeypatch.setenv("SSE_PATH", "/mcp/messages")

        with pytest.raises(ValueError, match="must differ"):
            ConfigManager(env_file_path=NO_ENV_FILE)

    def test_every_violation_is_reported(self, monkeypatch):
        monkeypatch.setenv("PORT", "0")
        monkeypatch.setenv("HEALTH_PATH", "health")

        with pytest.raises(ValueError) as exc_info:
            ConfigManager(env_file_path=NO_ENV_FILE)

        message = str(exc_info.value)
        assert "port must be between" in message
        assert "health_path must start with '/'" in message


class TestOverrides:
    """Test command-line overrides"""

    def test_apply_overrides(self):
        manager = ConfigManager(env_file_path=NO_ENV_FILE)

        manager.apply_overrides(host="localhost", port=9100, debug=True, assets_dir="build")

        assert manager.server.host == "localhost"
        assert manager.server.port == 9100
        assert manager.server.debug_mode is True
        assert manager.server.log_level == "DEBUG"
        assert manager.catalog.assets_dir == "build"

    def test_omitted_overrides_keep_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9001")
        manager = ConfigManager(env_file_path=NO_ENV_FILE)

        manager.apply_overrides()

        assert manager.server.port == 9001
        assert manager.server.debug_mode is False

    def test_invalid_override_rejected(self):
        manager = ConfigManager(env_file_path=NO_ENV_FILE)

        with pytest.raises(ValueError, match="port must be between"):
            manager.apply_overrides(port=99999)


class TestGlobalConfig:
    """Test process-wide configuration access"""

    def test_init_config_replaces_global(self):
        config = init_config(NO_ENV_FILE)

        assert get_config() is config

    def test_summary_shape(self):
        summary = ConfigManager(env_file_path=NO_ENV_FILE).get_summary()

        assert summary["server"]["port"] == 8000
        assert summary["transport"]["sse_path"] == "/mcp"
        assert summary["catalog"]["assets_dir"] == "dist"
