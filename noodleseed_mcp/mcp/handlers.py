"""
MCP JSON-RPC 2.0 protocol handlers for catalog discovery and tool calls
"""

from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from ..catalog import Catalog
from ..core import (
    InvalidArguments,
    MCPError,
    MCPRequest,
    MCPResponse,
    MCPServerError,
    ProtocolFault,
    ToolExecutionError,
    UnknownResource,
    UnknownTool
)
from ..logging import get_logger
from .dispatcher import CommandDispatcher

MCP_PROTOCOL_VERSION = "2024-11-05"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
# MCP resource errors
RESOURCE_NOT_FOUND = -32002

ERROR_CODES = {
    UnknownTool: INVALID_PARAMS,
    InvalidArguments: INVALID_PARAMS,
    UnknownResource: RESOURCE_NOT_FOUND,
    ToolExecutionError: INTERNAL_ERROR,
}

Handler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


class MCPHandlers:
    """
    MCP protocol message handlers

    One instance is bound to each session and holds that session's
    protocol state (handshake status, client info). Catalog and dispatcher
    are shared and read-only.
    """

    def __init__(
        self,
        catalog: Catalog,
        dispatcher: CommandDispatcher,
        server_name: str,
        server_version: str
    ):
        self.catalog = catalog
        self.dispatcher = dispatcher
        self.server_name = server_name
        self.server_version = server_version
        self.logger = get_logger(__name__)

        self.initialized = False
        self.client_info: Optional[Dict[str, Any]] = None

        # Method registry
        self.handlers: Dict[str, Handler] = {
            "initialize": self.handle_initialize,
            "ping": self.handle_ping,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
            "resources/list": self.handle_resources_list,
            "resources/read": self.handle_resources_read,
            "resources/templates/list": self.handle_resource_templates_list,
        }

        self.notification_handlers: Dict[str, Handler] = {
            "notifications/initialized": self.handle_initialized_notification,
            "notifications/cancelled": self.handle_cancelled_notification,
        }

    async def handle_request(self, request_data: Dict[str, Any]) -> Optional[MCPResponse]:
        """
        Main entry point for one inbound JSON-RPC message.

        Returns None for notifications. Raises ProtocolFault when the
        envelope itself is malformed; every other failure becomes a
        JSON-RPC error response.
        """
        try:
            request = MCPRequest.model_validate(request_data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "message"
            raise ProtocolFault(f"Invalid JSON-RPC message ({location}): {first['msg']}") from e

        if request.is_notification:
            handler = self.notification_handlers.get(request.method)
            if handler is None:
                self.logger.debug(f"Ignoring notification: {request.method}")
            else:
                await handler(request.params or {})
            return None

        if request.id is None:
            return MCPResponse(
                id=None,
                error=MCPError(code=INVALID_REQUEST, message="Request id must not be null")
            )

        handler = self.handlers.get(request.method)
        if not handler:
            return MCPResponse(
                id=request.id,
                error=MCPError(code=METHOD_NOT_FOUND, message=f"Method not found: {request.method}")
            )

        try:
            result = await handler(request.params or {})
        except MCPServerError as e:
            self.logger.info(f"{request.method} failed: {e.kind}: {e.message}")
            return MCPResponse(
                id=request.id,
                error=MCPError(
                    code=ERROR_CODES.get(type(e), INTERNAL_ERROR),
                    message=e.message,
                    data=e.to_dict()
                )
            )
        except Exception as e:
            self.logger.exception(f"Error handling MCP request {request.method}")
            return MCPResponse(
                id=request.id,
                error=MCPError(code=INTERNAL_ERROR, message=f"Internal error: {e}")
            )

        return MCPResponse(id=request.id, result=result)

    # Lifecycle

    async def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.client_info = params.get("clientInfo")
        self.initialized = True
        client_name = (self.client_info or {}).get("name", "unknown")
        self.logger.info(f"Initialize handshake from client {client_name}")

        return {
            "protocolVersion": params.get("protocolVersion") or MCP_PROTOCOL_VERSION,
            "capabilities": {
                "tools": {},
                "resources": {},
            },
            "serverInfo": {
                "name": self.server_name,
                "version": self.server_version,
            },
        }

    async def handle_initialized_notification(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.debug("Client reported initialization complete")
        return {}

    async def handle_cancelled_notification(self, params: Dict[str, Any]) -> Dict[str, Any]:
        # Dispatch is synchronous, so there is never an in-flight request to cancel.
        self.logger.debug(f"Cancellation for request {params.get('requestId')} ignored")
        return {}

    async def handle_ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    # Tools

    async def handle_tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "tools": [
                {
                    "name": entry.id,
                    "title": entry.title,
                    "description": entry.description or entry.title,
                    "inputSchema": entry.input_schema(),
                    "_meta": entry.presentation_metadata(),
                }
                for entry in self.catalog.list()
            ]
        }

    async def handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidArguments("Tool name is required", field="name")

        result = self.dispatcher.dispatch(name, params.get("arguments"))

        return {
            "content": [
                {
                    "type": "text",
                    "text": result.display_text,
                }
            ],
            "structuredContent": result.structured_payload,
            "_meta": result.presentation_metadata,
        }

    # Resources

    async def handle_resources_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "resources": [
                {
                    "uri": entry.uri,
                    "name": entry.title,
                    "description": f"{entry.title} - Interactive widget",
                    "mimeType": entry.mime_type,
                    "_meta": entry.presentation_metadata(),
                }
                for entry in self.catalog.list()
            ]
        }

    async def handle_resource_templates_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "resourceTemplates": [
                {
                    "uriTemplate": entry.uri,
                    "name": entry.title,
                    "description": f"{entry.title} - Interactive widget",
                    "mimeType": entry.mime_type,
                    "_meta": entry.presentation_metadata(),
                }
                for entry in self.catalog.list()
            ]
        }

    async def handle_resources_read(self, params: Dict[str, Any]) -> Dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str) or not uri:
            raise InvalidArguments("Resource uri is required", field="uri")

        entry = self.catalog.get_by_uri(uri)
        if entry is None:
            raise UnknownResource(uri)

        self.logger.info(f"Serving widget template: {entry.id}")

        return {
            "contents": [
                {
                    "uri": entry.uri,
                    "mimeType": entry.mime_type,
                    "text": entry.payload,
                    "_meta": entry.presentation_metadata(),
                }
            ]
        }
