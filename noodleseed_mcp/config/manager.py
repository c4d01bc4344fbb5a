"""
Server settings read from the environment
=========================================

Listener, SSE transport and widget catalog settings, each a dataclass
filled from environment variables (optionally seeded from a .env file)
and checked as a whole before the server starts.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """Server listener and runtime configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    debug_mode: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    name: str = "noodleseed-mcp"
    version: str = "2.0.0"
    max_message_size: int = 1024 * 1024


@dataclass
class TransportConfig:
    """SSE transport paths and stream keepalive settings"""
    sse_path: str = "/mcp"
    post_path: str = "/mcp/messages"
    health_path: str = "/health"
    session_header: str = "Mcp-Session-Id"
    heartbeat_interval: float = 15.0  # seconds, 0 disables heartbeats
    cors_origin: str = "*"


@dataclass
class CatalogConfig:
    """Widget catalog configuration"""
    assets_dir: str = "dist"


class ConfigManager:
    """Environment-backed settings for one server process"""

    def __init__(self, env_file_path: Optional[str] = None):
        self._load_env_file(env_file_path)

        self.server = self._load_server_config()
        self.transport = self._load_transport_config()
        self.catalog = self._load_catalog_config()

        self._validate_configuration()

        logger.debug(f"Configuration ready: {self.server.host}:{self.server.port}")

    def _load_env_file(self, env_file_path: Optional[str]) -> None:
        """Seed os.environ from a .env file (default ./.env) when present"""
        env_path = Path(env_file_path) if env_file_path else Path(".env")

        if env_path.exists():
            load_dotenv(env_path, override=True)
            logger.info(f"Loaded environment variables from {env_path}")

    def _get_env_bool(self, key: str, default: bool) -> bool:
        """true/1/yes/on (any case) are truthy"""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    def _get_env_int(self, key: str, default: int) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            logger.warning(f"Invalid integer value for {key}, using default: {default}")
            return default

    def _get_env_float(self, key: str, default: float) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            logger.warning(f"Invalid float value for {key}, using default: {default}")
            return default

    def _load_server_config(self) -> ServerConfig:
        return ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=self._get_env_int("PORT", 8000),
            debug_mode=self._get_env_bool("DEBUG_MODE", False),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            max_message_size=self._get_env_int("MAX_MESSAGE_SIZE", 1024 * 1024)
        )

    def _load_transport_config(self) -> TransportConfig:
        return TransportConfig(
            sse_path=os.getenv("SSE_PATH", "/mcp"),
            post_path=os.getenv("POST_PATH", "/mcp/messages"),
            health_path=os.getenv("HEALTH_PATH", "/health"),
            heartbeat_interval=self._get_env_float("HEARTBEAT_INTERVAL", 15.0),
            cors_origin=os.getenv("CORS_ORIGIN", "*")
        )

    def _load_catalog_config(self) -> CatalogConfig:
        return CatalogConfig(
            assets_dir=os.getenv("WIDGET_ASSETS_DIR", "dist")
        )

    def _validate_configuration(self) -> None:
        """Raise ValueError listing every invalid setting"""
        errors = []

        if not (1 <= self.server.port <= 65535):
            errors.append("Server port must be between 1 and 65535")

        if self.server.max_message_size <= 0:
            errors.append("max_message_size must be positive")

        if self.transport.heartbeat_interval < 0:
            errors.append("heartbeat_interval must not be negative")

        for name in ("sse_path", "post_path", "health_path"):
            if not getattr(self.transport, name).startswith("/"):
                errors.append(f"Transport {name} must start with '/'")

        if self.transport.sse_path == self.transport.post_path:
            errors.append("sse_path and post_path must differ")

        if errors:
            error_msg = "Invalid server configuration:\n" + "\n".join(f"  - {error}" for error in errors)
            logger.error(error_msg)
            raise ValueError(error_msg)

    def apply_overrides(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        debug: Optional[bool] = None,
        assets_dir: Optional[str] = None
    ) -> None:
        """Apply command-line overrides on top of the environment and re-validate"""
        if host is not None:
            self.server.host = host
        if port is not None:
            self.server.port = port
        if debug:
            self.server.debug_mode = True
            self.server.log_level = "DEBUG"
        if assets_dir is not None:
            self.catalog.assets_dir = assets_dir

        self._validate_configuration()

    def get_summary(self) -> Dict[str, Any]:
        """Settings worth printing at startup"""
        return {
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "debug_mode": self.server.debug_mode,
                "version": self.server.version
            },
            "transport": {
                "sse_path": self.transport.sse_path,
                "post_path": self.transport.post_path,
                "heartbeat_interval": self.transport.heartbeat_interval
            },
            "catalog": {
                "assets_dir": self.catalog.assets_dir
            }
        }


# Process-wide settings, built from the environment on first access
_settings: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    global _settings
    if _settings is None:
        _settings = ConfigManager()
    return _settings


def init_config(env_file_path: Optional[str] = None) -> ConfigManager:
    """Replace the process-wide settings, reading ``env_file_path`` first"""
    global _settings
    _settings = ConfigManager(env_file_path)
    return _settings
