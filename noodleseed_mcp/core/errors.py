"""
Error taxonomy for the session-multiplexed MCP server.

Every error carries a machine-readable ``kind`` and the HTTP status the
front door answers with, so failures of a single submit-command request can
be reported as ``{kind, message}`` bodies without any per-handler mapping.
"""

from typing import Any, Dict, Optional


class MCPServerError(Exception):
    """Base class for errors surfaced to clients"""

    kind = "InternalError"
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ProtocolFault(MCPServerError):
    """Malformed inbound frame; terminates the session it was sent to"""

    kind = "ProtocolFault"
    status = 400


class MissingIdentity(MCPServerError):
    """Submit-command request without a session identity"""

    kind = "MissingIdentity"
    status = 400

    def __init__(self, message: str = "Missing sessionId query parameter"):
        super().__init__(message)


class UnknownSession(MCPServerError):
    """Submit-command request for a session that is not registered"""

    kind = "UnknownSession"
    status = 404

    def __init__(self, session_id: str):
        super().__init__(f"Unknown session: {session_id}")
        self.session_id = session_id


class UnknownTool(MCPServerError):
    kind = "UnknownTool"
    status = 404

    def __init__(self, tool_id: str):
        super().__init__(f"Unknown tool: {tool_id}")
        self.tool_id = tool_id


class UnknownResource(MCPServerError):
    kind = "UnknownResource"
    status = 404

    def __init__(self, uri: str):
        super().__init__(f"Unknown resource: {uri}")
        self.uri = uri


class InvalidArguments(MCPServerError):
    """Argument validation failed; ``field`` names the violated field"""

    kind = "InvalidArguments"
    status = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field is not None:
            data["field"] = self.field
        return data


class ToolExecutionError(MCPServerError):
    """A catalog entry's response builder raised"""

    kind = "ToolExecutionError"
    status = 500


class SessionNotActive(MCPServerError):
    kind = "SessionNotActive"
    status = 409

    def __init__(self, session_id: str, state: str):
        super().__init__(f"Session {session_id} is not active (state: {state})")
        self.session_id = session_id
        self.state = state


class TransportFault(MCPServerError):
    """I/O failure writing to a session's stream"""

    kind = "TransportFault"
    status = 500


class PayloadTooLarge(MCPServerError):
    """Message body exceeds the configured size limit; request only"""

    kind = "PayloadTooLarge"
    status = 413

    def __init__(self, limit: int):
        super().__init__(f"Message body exceeds {limit} bytes")
        self.limit = limit


class DuplicateIdentity(MCPServerError):
    """Registry already holds the identity; fatal to one open attempt only"""

    kind = "DuplicateIdentity"
    status = 500

    def __init__(self, session_id: str):
        super().__init__(f"Session identity already registered: {session_id}")
        self.session_id = session_id


class CatalogError(ValueError):
    """Catalog construction failed (duplicate id or uri)"""
