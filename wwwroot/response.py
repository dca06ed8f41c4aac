"""
Response - HTTP response builder with ASGI streaming support.

Provides:
- ASGI 3 compliant response sending
- Support for bytes, str, dict/list (JSON) and async iterables
- File streaming backed by aiofiles
- Shorthand constructors for the common error responses
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import (
    Any, AsyncIterator, Awaitable, Callable, Dict, List,
    Mapping, Optional, Union
)

import aiofiles


logger = logging.getLogger("wwwroot.response")

PathLike = Union[str, Path]

DEFAULT_CHUNK_SIZE = 64 * 1024


class Response:
    """
    HTTP response with ASGI 3 streaming support.

    Header names are stored lower-cased. ``content`` may be bytes, str,
    a dict/list (encoded as JSON) or an async iterator of bytes.
    """

    def __init__(
        self,
        content: Any = b"",
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        media_type: Optional[str] = None,
        *,
        encoding: str = "utf-8",
    ):
        self.status = status
        self._content = content
        self.encoding = encoding

        self._headers: Dict[str, str] = {}
        if headers:
            for key, value in headers.items():
                self._headers[key.lower()] = value

        if media_type:
            self._headers["content-type"] = media_type
        elif "content-type" not in self._headers:
            self._headers["content-type"] = self._detect_media_type(content)

        self._bytes_sent = 0

    @property
    def headers(self) -> Dict[str, str]:
        return self._headers

    @property
    def content_type(self) -> Optional[str]:
        return self._headers.get("content-type")

    @property
    def bytes_sent(self) -> int:
        return self._bytes_sent

    def _detect_media_type(self, content: Any) -> str:
        if isinstance(content, (dict, list)):
            return "application/json"
        if isinstance(content, str):
            return f"text/plain; charset={self.encoding}"
        return "application/octet-stream"

    # ========================================================================
    # Constructors
    # ========================================================================

    @classmethod
    def json(cls, content: Any, status: int = 200, **kwargs) -> "Response":
        body = json.dumps(content, separators=(",", ":")).encode("utf-8")
        return cls(body, status=status, media_type="application/json", **kwargs)

    @classmethod
    def text(cls, content: str, status: int = 200, **kwargs) -> "Response":
        return cls(content, status=status, media_type="text/plain; charset=utf-8", **kwargs)

    @classmethod
    def file(
        cls,
        path: PathLike,
        *,
        media_type: str,
        status: int = 200,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        include_body: bool = True,
    ) -> "Response":
        """
        Create a file streaming response.

        The file is opened lazily when the body is sent, so a file removed
        between stat and send surfaces as an ``OSError`` from ``send_asgi``.

        Args:
            path: Absolute file path (already validated by the caller)
            media_type: Complete Content-Type header value
            status: HTTP status
            chunk_size: Streaming chunk size
            include_body: False for HEAD requests (headers only)
        """
        path = Path(path)
        file_size = path.stat().st_size

        headers = {"content-length": str(file_size)}

        async def _file_stream() -> AsyncIterator[bytes]:
            async with aiofiles.open(path, "rb") as f:
                while True:
                    chunk = await f.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk

        content = _file_stream() if include_body else b""
        return cls(content, status=status, media_type=media_type, headers=headers)

    # ========================================================================
    # ASGI Send
    # ========================================================================

    async def send_asgi(self, send: Callable[[dict], Awaitable[None]]) -> None:
        """Send response via ASGI."""
        content = self._content
        if isinstance(content, str):
            content = content.encode(self.encoding)
            self._content = content
        elif isinstance(content, (dict, list)):
            content = self._encode_body(content)
            self._content = content

        if isinstance(content, bytes) and "content-length" not in self._headers:
            self._headers["content-length"] = str(len(content))

        await send({
            "type": "http.response.start",
            "status": self.status,
            "headers": self._prepare_headers(),
        })
        await self._send_body(send)

    def _prepare_headers(self) -> List[tuple]:
        return [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers.items()
        ]

    async def _send_body(self, send: Callable[[dict], Awaitable[None]]) -> None:
        content = self._content

        if isinstance(content, bytes):
            self._bytes_sent = len(content)
            await send({"type": "http.response.body", "body": content, "more_body": False})
            return

        if hasattr(content, "__aiter__"):
            async for chunk in content:
                self._bytes_sent += len(chunk)
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
            await send({"type": "http.response.body", "body": b"", "more_body": False})
            return

        raise TypeError(f"Unsupported response content: {type(content).__name__}")

    def _encode_body(self, content: Any) -> bytes:
        return json.dumps(content, separators=(",", ":")).encode("utf-8")

    def __repr__(self) -> str:
        return f"<Response {self.status} {self.content_type}>"


# ============================================================================
# Shorthand constructors
# ============================================================================

def NotFound(message: str = "Not found") -> Response:
    return Response.json({"error": message}, status=404)


def Forbidden(message: str = "Forbidden") -> Response:
    return Response.json({"error": message}, status=403)


def InternalError(message: str = "Internal server error") -> Response:
    return Response.json({"error": message}, status=500)
