"""
MCP server protocol implementation over HTTP+SSE
"""

from .dispatcher import CommandDispatcher
from .handlers import MCPHandlers
from .registry import SessionRegistry
from .server import MCPSSEServer, create_server, main
from .session import MCPSession, SessionState

__all__ = [
    "CommandDispatcher",
    "MCPHandlers",
    "SessionRegistry",
    "MCPSSEServer",
    "create_server",
    "main",
    "MCPSession",
    "SessionState"
]
