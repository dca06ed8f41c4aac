"""
ASGI adapter - bridges the ASGI protocol to the wwwroot engine.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from .config import StaticFilesConfig
from .context import WebContext
from .engine import Engine
from .middleware import ExceptionMiddleware, LoggingMiddleware
from .middleware_ext.static import StaticFilesMiddleware
from .request import Request
from .response import InternalError


class ASGIAdapter:
    """
    ASGI application adapter.
    Converts ASGI events to wwwroot Request/Response.
    """

    __slots__ = ("engine", "logger")

    def __init__(self, engine: Engine):
        self.engine = engine
        self.logger = logging.getLogger("wwwroot.asgi")

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        scope_type = scope["type"]
        if scope_type == "http":
            await self.handle_http(scope, receive, send)
        elif scope_type == "lifespan":
            await self.handle_lifespan(scope, receive, send)
        else:
            self.logger.warning("Unsupported ASGI scope type: %s", scope_type)
            if scope_type == "websocket":
                await send({"type": "websocket.close", "code": 1003})

    async def handle_http(self, scope: dict, receive: Callable, send: Callable):
        request = Request(scope, receive)
        ctx = WebContext(request=request)

        try:
            response = await self.engine.handle(request, ctx)
        except Exception as e:
            self.logger.error("Critical error in request pipeline: %s", e, exc_info=True)
            response = InternalError()

        await response.send_asgi(send)

    async def handle_lifespan(self, scope: dict, receive: Callable, send: Callable):
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self.logger.debug("Startup complete")
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                self.logger.debug("Shutdown complete")
                await send({"type": "lifespan.shutdown.complete"})
                break


def create_app(
    config: Optional[StaticFilesConfig] = None,
    *,
    engine: Optional[Engine] = None,
    media_types: Optional[Mapping[str, str]] = None,
    debug: bool = False,
    access_log: bool = True,
) -> ASGIAdapter:
    """
    Build an ASGI app with exception handling, access logging and the
    static-file stage installed ahead of routing.

    Pass an ``engine`` to serve application routes behind the static stage.
    """
    engine = engine or Engine()
    engine.use(ExceptionMiddleware(debug=debug), priority=0, name="exceptions")
    if access_log:
        engine.use(LoggingMiddleware(), priority=10, name="access_log")
    engine.use(
        StaticFilesMiddleware.from_config(config or StaticFilesConfig(), media_types=media_types),
        priority=20,
        name="static_files",
    )
    return ASGIAdapter(engine)
