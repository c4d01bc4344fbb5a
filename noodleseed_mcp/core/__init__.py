"""
Shared core foundation for the NoodleSeed MCP server.

Components:
- models: wire and dispatch data models (JSON-RPC envelopes, CommandRequest, Result)
- errors: the error taxonomy shared by dispatcher, sessions and the front door
"""

from .models import (
    MCPRequest,
    MCPResponse,
    MCPError,
    CommandRequest,
    ToolOutput,
    Result
)

from .errors import (
    MCPServerError,
    ProtocolFault,
    MissingIdentity,
    UnknownSession,
    UnknownTool,
    UnknownResource,
    InvalidArguments,
    ToolExecutionError,
    SessionNotActive,
    TransportFault,
    PayloadTooLarge,
    DuplicateIdentity,
    CatalogError
)

__all__ = [
    # Data models
    "MCPRequest",
    "MCPResponse",
    "MCPError",
    "CommandRequest",
    "ToolOutput",
    "Result",

    # Errors
    "MCPServerError",
    "ProtocolFault",
    "MissingIdentity",
    "UnknownSession",
    "UnknownTool",
    "UnknownResource",
    "InvalidArguments",
    "ToolExecutionError",
    "SessionNotActive",
    "TransportFault",
    "PayloadTooLarge",
    "DuplicateIdentity",
    "CatalogError"
]
