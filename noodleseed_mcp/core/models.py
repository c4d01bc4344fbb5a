"""
Shared data models for the NoodleSeed MCP server.

Wire shapes use camelCase aliases (``toolId``, ``displayText``...) while
Python code addresses fields by their snake_case names.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


JSONRPCId = Union[str, int]


class MCPRequest(BaseModel):
    """MCP JSON-RPC 2.0 request or notification"""
    jsonrpc: Literal["2.0"] = "2.0"
    method: str = Field(min_length=1)
    params: Optional[Dict[str, Any]] = None
    id: Optional[JSONRPCId] = None

    @property
    def is_notification(self) -> bool:
        """No ``id`` member at all; an explicit null id is a malformed request"""
        return "id" not in self.model_fields_set


class MCPError(BaseModel):
    """MCP JSON-RPC 2.0 error format"""
    code: int
    message: str
    data: Optional[Any] = None


class MCPResponse(BaseModel):
    """MCP JSON-RPC 2.0 response format"""
    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[MCPError] = None
    id: Optional[JSONRPCId] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: exactly one of ``result``/``error``, ``id`` always present"""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.model_dump(exclude_none=True)
        else:
            message["result"] = self.result if self.result is not None else {}
        return message


class CommandRequest(BaseModel):
    """One tool invocation routed to a session; lives for a single dispatch"""
    model_config = ConfigDict(populate_by_name=True)

    session_identity: str = Field(alias="sessionIdentity")
    tool_id: str = Field(alias="toolId", min_length=1)
    arguments: Any = Field(default_factory=dict)


class ToolOutput(BaseModel):
    """What a catalog entry's response builder hands back to the dispatcher"""
    structured_payload: Dict[str, Any] = Field(default_factory=dict)
    display_text: Optional[str] = None


class Result(BaseModel):
    """Outcome of one successful dispatch, never cached"""
    model_config = ConfigDict(populate_by_name=True)

    display_text: str = Field(alias="displayText")
    structured_payload: Dict[str, Any] = Field(alias="structuredPayload", default_factory=dict)
    presentation_metadata: Dict[str, Any] = Field(alias="presentationMetadata", default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
