"""
Shared test fixtures and helpers for the wwwroot test suite.
"""

from pathlib import Path
from typing import List, Optional

import pytest

from wwwroot.context import WebContext
from wwwroot.request import Request


# ============================================================================
# Request Helpers
# ============================================================================


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    raw_headers = [
        (name.encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or [])
    ]
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "scheme": "http",
        "server": ("127.0.0.1", 8000),
        "client": ("127.0.0.1", 12345),
        "root_path": "",
    }


def make_receive(body: bytes = b""):
    """Create an ASGI receive callable delivering ``body`` in one message."""
    messages = [{"type": "http.request", "body": body, "more_body": False}]

    async def receive():
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


def make_ctx(path: str = "/", method: str = "GET", **kwargs) -> WebContext:
    return WebContext(request=Request(make_scope(method=method, path=path, **kwargs)))


class SendCollector:
    """ASGI send callable that records every message."""

    def __init__(self):
        self.messages: List[dict] = []

    async def __call__(self, message: dict) -> None:
        self.messages.append(message)

    @property
    def status(self) -> int:
        return self.messages[0]["status"]

    @property
    def headers(self) -> dict:
        return {
            name.decode("latin-1"): value.decode("latin-1")
            for name, value in self.messages[0]["headers"]
        }

    @property
    def body(self) -> bytes:
        return b"".join(m.get("body", b"") for m in self.messages[1:])


async def read_body(response) -> bytes:
    """Drain a Response through a collecting ASGI send."""
    collector = SendCollector()
    await response.send_asgi(collector)
    return collector.body


# ============================================================================
# Document root fixture
# ============================================================================


@pytest.fixture
def www_root(tmp_path: Path) -> Path:
    """A document root with a handful of typical assets."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    (root / "css").mkdir()
    (root / "css" / "site.css").write_text("body { color: red; }", encoding="utf-8")
    (root / "js").mkdir()
    (root / "js" / "app.js").write_text("console.log('ok');", encoding="utf-8")
    (root / "img").mkdir()
    (root / "img" / "LOGO.JPG").write_bytes(b"\xff\xd8\xff\xe0fakejpeg")
    (root / "img" / "photo.jpg").write_bytes(b"\xff\xd8\xff\xe0fakejpeg")
    (root / "data.unknownext").write_bytes(b"\x00\x01\x02")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<h1>Docs</h1>", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root
