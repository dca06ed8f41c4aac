"""
Request - ASGI request wrapper.

Exposes the parts of the ASGI scope the pipeline stages need: verb, path
info, headers, and a per-request state bag. The body is never read by the
static stage, so only a thin ``body()`` helper is provided for actions.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from ._datastructures import Headers


class Request:
    """
    Request object wrapping an ASGI HTTP scope.

    Attributes:
        scope: ASGI scope dict
        state: Mutable per-request state, owned by the handling coroutine
    """

    __slots__ = ("scope", "_receive", "state", "_headers", "_body")

    def __init__(
        self,
        scope: Mapping[str, Any],
        receive: Optional[Callable[[], Awaitable[dict]]] = None,
    ):
        self.scope = scope
        self._receive = receive
        self.state: Dict[str, Any] = {}
        self._headers: Optional[Headers] = None
        self._body: Optional[bytes] = None

    # ========================================================================
    # Basic Properties
    # ========================================================================

    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self.scope.get("method", "GET")

    @property
    def path(self) -> str:
        """Request path info (decoded)."""
        return self.scope.get("path", "/")

    @property
    def raw_path(self) -> bytes:
        return self.scope.get("raw_path", b"/")

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("utf-8")

    @property
    def client(self) -> Optional[tuple]:
        """Client address (host, port)."""
        return self.scope.get("client")

    # ========================================================================
    # Headers
    # ========================================================================

    @property
    def headers(self) -> Headers:
        if self._headers is None:
            self._headers = Headers(raw=list(self.scope.get("headers", [])))
        return self._headers

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get single header (case-insensitive)."""
        return self.headers.get(name, default)

    # ========================================================================
    # Body
    # ========================================================================

    async def body(self) -> bytes:
        """Read and cache the full request body."""
        if self._body is not None:
            return self._body
        chunks = []
        if self._receive is not None:
            while True:
                message = await self._receive()
                if message["type"] == "http.disconnect":
                    break
                chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    break
        self._body = b"".join(chunks)
        return self._body

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"
