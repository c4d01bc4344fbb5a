"""
HTTP+SSE server for the MCP widget catalog
"""

import argparse
import asyncio
import signal
import sys
from typing import Dict, Optional

from aiohttp import web
from pydantic import ValidationError

from ..catalog import Catalog, load_default_catalog
from ..config import ConfigManager, get_config, init_config
from ..core import (
    CommandRequest,
    MCPServerError,
    MissingIdentity,
    PayloadTooLarge,
    ProtocolFault,
    UnknownSession
)
from ..logging import configure_logging, get_logger, with_session_id
from ..utils import fast_json as json
from .dispatcher import CommandDispatcher
from .handlers import MCPHandlers
from .registry import SessionRegistry
from .session import MCPSession
from .sse import SSEStream


class MCPSSEServer:
    """SSE transport front door: open-stream, submit-command, preflight and health routes"""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        catalog: Optional[Catalog] = None,
        registry: Optional[SessionRegistry] = None
    ):
        self.config = config or get_config()
        self.logger = get_logger(__name__)

        self.host = self.config.server.host
        self.port = self.config.server.port
        self.transport = self.config.transport

        self.catalog = catalog
        self.dispatcher = CommandDispatcher(catalog) if catalog is not None else None
        self.registry = registry or SessionRegistry()
        self._runner: Optional[web.AppRunner] = None

        # Web application
        self.app = web.Application(client_max_size=self.config.server.max_message_size)
        self.app.router.add_get(self.transport.sse_path, self.sse_handler, allow_head=False)
        self.app.router.add_post(self.transport.post_path, self.message_handler)
        self.app.router.add_route("OPTIONS", self.transport.sse_path, self.preflight_handler)
        self.app.router.add_route("OPTIONS", self.transport.post_path, self.preflight_handler)
        self.app.router.add_get(self.transport.health_path, self.health_check)
        self.app.router.add_route("*", "/{tail:.*}", self.not_found)

        self.app.on_startup.append(self._on_startup)
        self.app.on_shutdown.append(self._on_shutdown)

    async def initialize(self):
        """Load the widget catalog if one was not supplied"""
        if self.catalog is None:
            self.catalog = await load_default_catalog(self.config.catalog.assets_dir)
        if self.dispatcher is None:
            self.dispatcher = CommandDispatcher(self.catalog)

        self.logger.info(f"Server initialized with {len(self.catalog)} catalog entries")

    async def _on_startup(self, app: web.Application):
        await self.initialize()

    async def _on_shutdown(self, app: web.Application):
        await self.close_all_sessions()

    def _cors_headers(self) -> Dict[str, str]:
        return {"Access-Control-Allow-Origin": self.transport.cors_origin}

    def _json_response(self, data, status: int = 200) -> web.Response:
        return web.json_response(data, status=status, headers=self._cors_headers(), dumps=json.dumps)

    def _error_response(self, error: MCPServerError) -> web.Response:
        return self._json_response(error.to_dict(), status=error.status)

    def _create_handlers(self) -> MCPHandlers:
        return MCPHandlers(
            self.catalog,
            self.dispatcher,
            self.config.server.name,
            self.config.server.version
        )

    # Routes

    async def sse_handler(self, request: web.Request) -> web.StreamResponse:
        """Open a session stream and hold it until the session closes"""
        stream = SSEStream(request, headers=self._cors_headers())

        try:
            session = await MCPSession.open(
                stream,
                self.registry,
                self._create_handlers(),
                endpoint=self.transport.post_path,
                heartbeat_interval=self.transport.heartbeat_interval
            )
        except MCPServerError as e:
            self.logger.error(f"Failed to open session: {e.kind}: {e.message}")
            if stream.prepared:
                return stream.response
            return self._error_response(e)

        with with_session_id(session.identity):
            self.logger.info(f"SSE stream opened from {request.remote}")
            await session.serve()

        return stream.response

    async def message_handler(self, request: web.Request) -> web.Response:
        """Route one POSTed message to the session named by its identity"""
        session_id = request.query.get("sessionId") or request.headers.get(self.transport.session_header)

        try:
            if not session_id:
                raise MissingIdentity()
            session = self.registry.lookup(session_id)
            if session is None:
                raise UnknownSession(session_id)
        except MCPServerError as e:
            self.logger.warning(f"Rejected message: {e.message}")
            return self._error_response(e)

        with with_session_id(session_id):
            try:
                body = await request.read()
            except web.HTTPRequestEntityTooLarge:
                error = PayloadTooLarge(self.config.server.max_message_size)
                self.logger.warning(f"Rejected message: {error.message}")
                return self._error_response(error)

            try:
                return await self._route_message(session, body)
            except ProtocolFault as e:
                self.logger.warning(f"Protocol fault, closing session: {e.message}")
                await session.close(f"protocol fault: {e.message}")
                return self._error_response(e)
            except MCPServerError as e:
                self.logger.info(f"Message failed: {e.kind}: {e.message}")
                return self._error_response(e)
            except Exception:
                self.logger.exception("Unexpected error while processing message")
                return self._json_response(
                    {"kind": "InternalError", "message": "Failed to process message"},
                    status=500
                )

    async def _route_message(self, session: MCPSession, body: bytes) -> web.Response:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise ProtocolFault(f"Invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ProtocolFault("Message body must be a JSON object")

        if "toolId" in payload:
            try:
                command = CommandRequest(
                    session_identity=session.identity,
                    tool_id=payload["toolId"],
                    arguments=payload.get("arguments", {})
                )
            except ValidationError as e:
                raise ProtocolFault(f"Invalid command: {e.errors()[0]['msg']}") from e

            result = await session.forward(command)
            return self._json_response(result.to_dict())

        if "jsonrpc" in payload or "method" in payload:
            if "method" not in payload and ("result" in payload or "error" in payload):
                # Client response to a server request; nothing to correlate it with
                return web.Response(status=202, text="Accepted", headers=self._cors_headers())

            response = await session.handle_message(payload)
            if response is None:
                return web.Response(status=202, text="Accepted", headers=self._cors_headers())
            return self._json_response(response.to_dict())

        raise ProtocolFault("Message is neither a tool command nor a JSON-RPC message")

    async def preflight_handler(self, request: web.Request) -> web.Response:
        headers = self._cors_headers()
        headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        headers["Access-Control-Allow-Headers"] = "content-type, mcp-session-id"
        return web.Response(status=204, headers=headers)

    async def health_check(self, request: web.Request) -> web.Response:
        return self._json_response({
            "status": "healthy",
            "server": self.config.server.name,
            "version": self.config.server.version
        })

    async def not_found(self, request: web.Request) -> web.Response:
        return self._json_response(
            {"kind": "NotFound", "message": f"No route for {request.method} {request.path}"},
            status=404
        )

    # Lifecycle

    async def close_all_sessions(self):
        """Close every registered session; one failure never blocks the others"""
        sessions = self.registry.snapshot()
        if not sessions:
            return

        self.logger.info(f"Closing {len(sessions)} active sessions...")
        outcomes = await asyncio.gather(
            *(session.close("server shutdown") for session in sessions),
            return_exceptions=True
        )
        for session, outcome in zip(sessions, outcomes):
            if isinstance(outcome, BaseException):
                self.logger.error(f"Failed to close session {session.identity}: {outcome}")

    async def start_server(self) -> web.AppRunner:
        """Start the web server"""
        runner = web.AppRunner(self.app, handler_cancellation=True)
        await runner.setup()

        site = web.TCPSite(runner, self.host, self.port)
        await site.start()
        self._runner = runner

        self.logger.info(f"NoodleSeed MCP Server started on http://{self.host}:{self.port}")
        self.logger.info(f"SSE stream: GET {self.transport.sse_path}")
        self.logger.info(f"Message post: POST {self.transport.post_path}?sessionId=...")
        return runner

    async def stop_server(self):
        """Close every session and release the listener"""
        self.logger.info("Stopping NoodleSeed MCP Server...")

        await self.close_all_sessions()
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        self.logger.info("NoodleSeed MCP Server stopped")


def create_server(
    config: Optional[ConfigManager] = None,
    catalog: Optional[Catalog] = None
) -> MCPSSEServer:
    """Factory function to create MCP server"""
    return MCPSSEServer(config=config, catalog=catalog)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="NoodleSeed MCP Server - widget catalog over HTTP+SSE"
    )
    parser.add_argument("--host", default=None, help="Host to bind to (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: PORT or 8000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--assets-dir", default=None, help="Directory holding widget HTML templates")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    return parser.parse_args(argv)


async def serve(config: ConfigManager) -> None:
    """Run the server until SIGINT or SIGTERM"""
    logger = get_logger(__name__)
    server = create_server(config)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(signum, lambda *_: loop.call_soon_threadsafe(stop.set))

    await server.start_server()
    logger.info("=" * 50)
    logger.info("[READY] NoodleSeed MCP Server is running!")
    logger.info(f"[HEALTH] Health Check: http://{server.host}:{server.port}{config.transport.health_path}")
    logger.info(f"[DEBUG] Debug Mode: {'Enabled' if config.server.debug_mode else 'Disabled'}")
    logger.info("=" * 50)
    logger.info("Press Ctrl+C to stop the server")

    try:
        await stop.wait()
        logger.info("Shutdown signal received")
    finally:
        await server.stop_server()


def main(argv=None) -> int:
    """Console entry point"""
    args = parse_args(argv)

    try:
        config = init_config(args.env_file)
        config.apply_overrides(
            host=args.host,
            port=args.port,
            debug=args.debug,
            assets_dir=args.assets_dir
        )
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(config)
    logger = get_logger(__name__)
    logger.info("Starting NoodleSeed MCP Server...", extra={"config": config.get_summary()})

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
