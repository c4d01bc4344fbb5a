"""
Server settings

Usage:
    from noodleseed_mcp.config import get_config

    config = get_config()
    print(f"SSE stream on {config.server.host}:{config.server.port}{config.transport.sse_path}")
"""

from .manager import (
    ConfigManager,
    ServerConfig,
    TransportConfig,
    CatalogConfig,
    get_config,
    init_config
)

__all__ = [
    "ConfigManager",
    "ServerConfig",
    "TransportConfig",
    "CatalogConfig",
    "get_config",
    "init_config"
]
