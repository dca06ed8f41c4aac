"""
Engine - the hosting request pipeline.

Runs registered pipeline stages around route dispatch:

    before-routing (each stage, in order; first handler wins)
        └─► route match ──none──► 404
                └─► before-action (each stage) ──► action ──► after-action (reverse)

Chain middleware (logging, exception handling) and pipeline stages share a
single ``MiddlewareStack``; the route dispatch is the final handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .context import WebContext
from .faults import RouteConflictFault
from .middleware import Handler, Middleware, MiddlewareStack, PipelineMiddleware
from .request import Request
from .response import NotFound, Response

Action = Callable[[WebContext], Awaitable[Response]]


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    action: Action
    controller_name: str
    action_name: str


class Router:
    """Exact ``(METHOD, path)`` route table."""

    def __init__(self):
        self._routes: Dict[Tuple[str, str], Route] = {}

    def add(self, method: str, path: str, action: Action, *, name: Optional[str] = None) -> Route:
        method = method.upper()
        key = (method, path)
        if key in self._routes:
            raise RouteConflictFault(method, path)
        route = Route(
            method=method,
            path=path,
            action=action,
            controller_name=getattr(action, "__module__", "") or "",
            action_name=name or getattr(action, "__name__", "action"),
        )
        self._routes[key] = route
        return route

    def match(self, method: str, path: str) -> Optional[Route]:
        route = self._routes.get((method.upper(), path))
        if route is None and method.upper() == "HEAD":
            route = self._routes.get(("GET", path))
        return route

    def __len__(self) -> int:
        return len(self._routes)


class Engine:
    """
    Request pipeline with routing and lifecycle-hook middlewares.

    Example:
        engine = Engine()
        engine.use(StaticFilesMiddleware(document_root="./www"))

        @engine.route("GET", "/api/ping")
        async def ping(ctx):
            return Response.json({"pong": True})
    """

    def __init__(self):
        self.router = Router()
        self.middleware_stack = MiddlewareStack()
        self.logger = logging.getLogger("wwwroot.engine")
        self._chain: Optional[Handler] = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def use(self, middleware: Middleware, priority: int = 50, name: Optional[str] = None) -> "Engine":
        """Register a chain middleware or a ``PipelineMiddleware``."""
        self.middleware_stack.add(middleware, priority=priority, name=name)
        self._chain = None
        return self

    def route(self, method: str, path: str, *, name: Optional[str] = None):
        def decorator(action: Action) -> Action:
            self.router.add(method, path, action, name=name)
            return action
        return decorator

    @property
    def pipeline_middlewares(self) -> List[PipelineMiddleware]:
        return [mw for mw in self.middleware_stack if isinstance(mw, PipelineMiddleware)]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def handle(self, request: Request, ctx: WebContext) -> Response:
        if self._chain is None:
            self._chain = self.middleware_stack.build_handler(self._dispatch)
        return await self._chain(request, ctx)

    async def _dispatch(self, request: Request, ctx: WebContext) -> Response:
        """Final handler: route match plus the action hooks."""
        route = self.router.match(request.method, request.path)
        if route is None:
            return NotFound()

        stages = self.pipeline_middlewares
        handled = False
        for stage in stages:
            if await stage.on_before_action(ctx, route.controller_name, route.action_name):
                handled = True
                break

        if not handled:
            ctx.response = await route.action(ctx)

        for stage in reversed(stages):
            await stage.on_after_action(ctx, route.action_name, handled)

        if ctx.response is None:
            self.logger.warning(
                "Action %s short-circuited without a response", route.action_name,
            )
            return Response(b"", status=204)
        return ctx.response
