"""
Server-Sent Events framing over an aiohttp streaming response
"""

from typing import Dict, Optional

from aiohttp import web

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: Optional[str], data: str) -> bytes:
    """Encode one SSE event; multi-line data becomes multiple ``data:`` fields"""
    lines = []
    if event:
        lines.append(f"event: {event}")
    for line in data.splitlines() or [""]:
        lines.append(f"data: {line}")
    return ("\n".join(lines) + "\n\n").encode("utf-8")


def format_comment(text: str) -> bytes:
    return f": {text}\n\n".encode("utf-8")


class SSEStream:
    """
    Outbound event stream bound to one GET request.

    Write errors surface as ``ConnectionError`` or ``RuntimeError`` (write
    after EOF); the owning session turns them into transport faults.
    """

    def __init__(self, request: web.Request, headers: Optional[Dict[str, str]] = None):
        self._request = request
        self._response = web.StreamResponse(
            status=200,
            reason="OK",
            headers={**SSE_HEADERS, **(headers or {})}
        )

    @property
    def response(self) -> web.StreamResponse:
        return self._response

    @property
    def prepared(self) -> bool:
        return self._response.prepared

    @property
    def is_closing(self) -> bool:
        transport = self._request.transport
        return transport is None or transport.is_closing()

    async def prepare(self) -> None:
        await self._response.prepare(self._request)

    async def send(self, event: str, data: str) -> None:
        await self._write(format_event(event, data))

    async def comment(self, text: str) -> None:
        await self._write(format_comment(text))

    async def _write(self, frame: bytes) -> None:
        if self.is_closing:
            raise ConnectionResetError("Stream transport is closed")
        await self._response.write(frame)

    async def close(self) -> None:
        """Finish the response body if the peer is still connected"""
        if self._response.prepared and not self.is_closing:
            await self._response.write_eof()
