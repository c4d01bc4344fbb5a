"""
Test configuration and utilities
"""

import logging
from typing import List, Optional, Tuple

import pytest

from noodleseed_mcp.catalog import Catalog, default_entries
from noodleseed_mcp.config import ConfigManager
from noodleseed_mcp.mcp import CommandDispatcher, MCPHandlers, SessionRegistry


class RecordingStream:
    """In-memory stand-in for SSEStream that records every frame"""

    def __init__(self, fail_prepare: bool = False):
        self.frames: List[Tuple[Optional[str], str]] = []
        self.prepared = False
        self.closed = False
        self.fail_prepare = fail_prepare
        self.fail_writes = False

    @property
    def is_closing(self) -> bool:
        return self.closed

    async def prepare(self):
        if self.fail_prepare:
            raise ConnectionResetError("peer went away during handshake")
        self.prepared = True

    async def send(self, event: str, data: str):
        if self.fail_writes or self.closed:
            raise ConnectionResetError("stream closed")
        self.frames.append((event, data))

    async def comment(self, text: str):
        if self.fail_writes or self.closed:
            raise ConnectionResetError("stream closed")
        self.frames.append((None, text))

    async def close(self):
        self.closed = True

    def events(self, name: str) -> List[str]:
        return [data for event, data in self.frames if event == name]


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests"""
    logging.getLogger().setLevel(logging.DEBUG)

    # Suppress noisy loggers during tests
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@pytest.fixture
def test_config(monkeypatch, tmp_path):
    """Configuration isolated from the developer's environment"""
    for key in ("HOST", "PORT", "DEBUG_MODE", "LOG_LEVEL", "LOG_FILE", "MAX_MESSAGE_SIZE",
                "SSE_PATH", "POST_PATH", "HEALTH_PATH", "HEARTBEAT_INTERVAL",
                "CORS_ORIGIN", "WIDGET_ASSETS_DIR"):
        monkeypatch.delenv(key, raising=False)

    config = ConfigManager(env_file_path=str(tmp_path / "missing.env"))
    config.catalog.assets_dir = str(tmp_path / "dist")
    return config


@pytest.fixture
def catalog():
    """Default widget catalog with placeholder markup"""
    return Catalog(default_entries())


@pytest.fixture
def dispatcher(catalog):
    return CommandDispatcher(catalog)


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def make_handlers(catalog, dispatcher):
    """Factory for per-session protocol engines"""
    def factory() -> MCPHandlers:
        return MCPHandlers(catalog, dispatcher, "noodleseed-mcp", "2.0.0")
    return factory


@pytest.fixture
def stream():
    return RecordingStream()
