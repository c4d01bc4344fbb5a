"""
Per-connection session lifecycle over an SSE stream
"""

import asyncio
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from ..core import (
    CommandRequest,
    MCPResponse,
    Result,
    SessionNotActive,
    TransportFault
)
from ..logging import get_logger, with_session_id
from ..utils.fast_json import dumps
from .handlers import MCPHandlers
from .registry import SessionRegistry


class SessionState(str, Enum):
    OPENING = "opening"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class MCPSession:
    """
    One client connection: Opening -> Active -> Closing -> Closed.

    The registry entry exists exactly while the session is Active. Every
    path that ends the session (peer disconnect, write failure, protocol
    fault, server shutdown) goes through ``close``, which runs its teardown
    once no matter how many of those paths fire.
    """

    def __init__(
        self,
        stream,
        registry: SessionRegistry,
        handlers: MCPHandlers,
        heartbeat_interval: float = 15.0,
        session_id: Optional[str] = None
    ):
        self.identity = session_id or str(uuid.uuid4())
        self.stream = stream
        self.registry = registry
        self.handlers = handlers
        self.heartbeat_interval = heartbeat_interval
        self.logger = get_logger(__name__)

        self._state = SessionState.OPENING
        self._write_lock = asyncio.Lock()
        self._closed = asyncio.Event()
        self.close_reason: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @classmethod
    async def open(
        cls,
        stream,
        registry: SessionRegistry,
        handlers: MCPHandlers,
        endpoint: str,
        heartbeat_interval: float = 15.0,
        session_id: Optional[str] = None
    ) -> "MCPSession":
        """
        Complete the stream handshake, register and announce the session.

        The first frame on the stream is the ``endpoint`` event carrying the
        URL the client must POST its messages to.

        Raises:
            TransportFault: the handshake or endpoint frame could not be written
            DuplicateIdentity: the identity is already registered
        """
        session = cls(
            stream,
            registry,
            handlers,
            heartbeat_interval=heartbeat_interval,
            session_id=session_id
        )
        try:
            await session._handshake(endpoint)
        except BaseException:
            await session.close("handshake failed")
            raise
        return session

    async def _handshake(self, endpoint: str) -> None:
        try:
            await self.stream.prepare()
        except (ConnectionError, RuntimeError) as e:
            raise TransportFault(f"Stream handshake failed: {e}") from e

        # No await between these two lines: a lookup never sees a
        # registered session that is not yet Active.
        self.registry.register(self.identity, self)
        self._state = SessionState.ACTIVE

        await self._send_frame("endpoint", f"{endpoint}?sessionId={self.identity}")
        with with_session_id(self.identity):
            self.logger.info("Session opened")

    async def serve(self) -> None:
        """
        Hold the stream open until the session closes.

        Sends a heartbeat comment every ``heartbeat_interval`` seconds so a
        vanished peer surfaces as a write failure. Always leaves the session
        Closed.
        """
        reason = "stream ended"
        try:
            while not self._closed.is_set():
                if self.heartbeat_interval <= 0:
                    await self.wait_closed()
                    break
                try:
                    await asyncio.wait_for(self.wait_closed(), timeout=self.heartbeat_interval)
                except asyncio.TimeoutError:
                    await self._send_frame(None, "ping")
        except TransportFault as e:
            reason = f"transport fault: {e.message}"
            with with_session_id(self.identity):
                self.logger.warning(f"Heartbeat failed: {e.message}")
        except asyncio.CancelledError:
            reason = "peer disconnected"
            raise
        finally:
            await self.close(reason)

    async def forward(self, command: CommandRequest) -> Result:
        """
        Execute a tool command on behalf of this session.

        The Result is returned to the caller and also pushed as a
        ``result`` event on the stream when the session is still Active.

        Raises:
            SessionNotActive: the session has left the Active state
            UnknownTool, InvalidArguments, ToolExecutionError: from dispatch
        """
        self._ensure_active()
        with with_session_id(self.identity):
            result = self.handlers.dispatcher.dispatch(command.tool_id, command.arguments)
            await self._deliver("result", dumps(result.to_dict()))
        return result

    async def handle_message(self, message: Dict[str, Any]) -> Optional[MCPResponse]:
        """
        Run one JSON-RPC message through this session's protocol engine.

        Responses are pushed as ``message`` events as well as returned;
        notifications return None.

        Raises:
            SessionNotActive: the session has left the Active state
            ProtocolFault: the message is not a valid JSON-RPC envelope
        """
        self._ensure_active()
        with with_session_id(self.identity):
            response = await self.handlers.handle_request(message)
            if response is not None:
                await self._deliver("message", dumps(response.to_dict()))
        return response

    async def close(self, reason: str = "closed") -> None:
        """Tear the session down; later calls are no-ops"""
        if self._state in (SessionState.CLOSING, SessionState.CLOSED):
            return
        self._state = SessionState.CLOSING
        self.close_reason = reason

        self.registry.remove(self.identity, self)
        self._closed.set()

        try:
            await self.stream.close()
        except (ConnectionError, RuntimeError) as e:
            self.logger.debug(f"Ignoring error while ending stream {self.identity}: {e}")
        finally:
            self._state = SessionState.CLOSED
            with with_session_id(self.identity):
                self.logger.info(f"Session closed ({reason})")

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def describe(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "initialized": self.handlers.initialized,
            "client": (self.handlers.client_info or {}).get("name"),
        }

    def _ensure_active(self) -> None:
        if self._state is not SessionState.ACTIVE:
            raise SessionNotActive(self.identity, self._state.value)

    async def _deliver(self, event: str, data: str) -> bool:
        """Best-effort push; a failed write closes the session"""
        if self._state is not SessionState.ACTIVE:
            self.logger.debug(f"Dropping {event} event, session is {self._state.value}")
            return False
        try:
            await self._send_frame(event, data)
        except TransportFault as e:
            self.logger.warning(f"Dropping {event} event: {e.message}")
            await self.close(f"transport fault: {e.message}")
            return False
        return True

    async def _send_frame(self, event: Optional[str], data: str) -> None:
        async with self._write_lock:
            try:
                if event is None:
                    await self.stream.comment(data)
                else:
                    await self.stream.send(event, data)
            except (ConnectionError, RuntimeError) as e:
                raise TransportFault(f"Write to session stream failed: {e}") from e
