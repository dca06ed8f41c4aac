"""
Middleware system - lifecycle hooks plus composable async chain middleware.

Two shapes of middleware live side by side:

- Chain middleware: ``async (request, ctx, next) -> Response`` callables,
  wrapped around a final handler by ``MiddlewareStack``.
- ``PipelineMiddleware``: a stage with three lifecycle hooks
  (before routing, before action, after action). It is also a chain
  middleware, so it can be registered on a ``MiddlewareStack`` directly.
"""

from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from .context import WebContext
from .faults import Fault, FaultDomain, Severity
from .request import Request
from .response import Forbidden, NotFound, Response

Handler = Callable[[Request, WebContext], Awaitable[Response]]
Middleware = Callable[[Request, WebContext, Handler], Awaitable[Response]]


class PipelineMiddleware:
    """
    Base class for pipeline stages.

    Subclasses override the hooks they care about; the defaults never
    handle anything, so a subclass stays substitutable wherever the full
    set of hooks is expected.
    """

    async def on_before_routing(self, ctx: WebContext) -> bool:
        """Runs before route matching. Return True when the request was handled."""
        return False

    async def on_before_action(
        self, ctx: WebContext, controller_name: str, action_name: str
    ) -> bool:
        """Runs after routing, before the action. Return True to skip the action."""
        return False

    async def on_after_action(
        self, ctx: WebContext, action_name: str, handled: bool
    ) -> None:
        """Runs after the action (or after a before-action short-circuit)."""
        return None

    async def __call__(self, request: Request, ctx: WebContext, next: Handler) -> Response:
        if await self.on_before_routing(ctx):
            return ctx.response if ctx.response is not None else Response(b"", status=204)
        return await next(request, ctx)


@dataclass
class MiddlewareDescriptor:
    """Descriptor for middleware registration."""
    middleware: Middleware
    priority: int
    name: str


class MiddlewareStack:
    """
    Manages the middleware stack with deterministic ordering.

    Lower priority runs first (outermost). Equal priorities keep their
    registration order.
    """

    def __init__(self):
        self.middlewares: List[MiddlewareDescriptor] = []
        self._sorted = True

    def add(
        self,
        middleware: Middleware,
        priority: int = 50,
        name: Optional[str] = None,
    ) -> None:
        if name is None:
            name = getattr(middleware, "__name__", type(middleware).__name__)
        self.middlewares.append(MiddlewareDescriptor(middleware, priority, name))
        self._sorted = False

    def __iter__(self):
        self._ensure_sorted()
        return (desc.middleware for desc in self.middlewares)

    def __len__(self) -> int:
        return len(self.middlewares)

    def _ensure_sorted(self) -> None:
        if not self._sorted:
            # list.sort is stable, so registration order breaks ties
            self.middlewares.sort(key=lambda desc: desc.priority)
            self._sorted = True

    def build_handler(self, final_handler: Handler) -> Handler:
        """Build middleware chain wrapping the final handler."""
        self._ensure_sorted()
        handler = final_handler
        for desc in reversed(self.middlewares):
            handler = self._wrap_middleware(desc.middleware, handler)
        return handler

    def _wrap_middleware(self, middleware: Middleware, next_handler: Handler) -> Handler:
        async def wrapped(request: Request, ctx: WebContext) -> Response:
            return await middleware(request, ctx, next_handler)

        return wrapped


# Default middleware implementations

class ExceptionMiddleware:
    """
    Catches exceptions escaping the pipeline and converts them to JSON
    error responses.
    """

    _LOG_LEVEL_BY_SEVERITY = {
        Severity.INFO: logging.INFO,
        Severity.WARN: logging.WARNING,
        Severity.ERROR: logging.ERROR,
        Severity.FATAL: logging.CRITICAL,
    }

    _STATUS_BY_DOMAIN = {
        FaultDomain.ROUTING: 404,
        FaultDomain.IO: 502,
        FaultDomain.CONFIG: 500,
        FaultDomain.SYSTEM: 500,
    }

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.logger = logging.getLogger("wwwroot.exceptions")

    async def __call__(self, request: Request, ctx: WebContext, next: Handler) -> Response:
        try:
            return await next(request, ctx)

        except Fault as e:
            status = self._STATUS_BY_DOMAIN.get(e.domain, 500)
            self.logger.log(
                self._LOG_LEVEL_BY_SEVERITY.get(e.severity, logging.ERROR),
                "Fault %s: %s", e.code, e.message,
            )
            error = e.to_dict()
            if not (e.public or self.debug):
                error["message"] = "Internal server error"
            return Response.json({"error": error}, status=status)

        except PermissionError as e:
            self.logger.warning("PermissionError: %s", e)
            return Forbidden()

        except FileNotFoundError as e:
            self.logger.warning("FileNotFoundError: %s", e)
            return NotFound()

        except Exception as e:
            self.logger.error("Unhandled exception: %s", e, exc_info=True)
            error_data = {"error": "Internal server error"}
            if self.debug:
                error_data["detail"] = str(e)
                error_data["traceback"] = traceback.format_exc()
            return Response.json(error_data, status=500)


class LoggingMiddleware:
    """Logs request/response with timing."""

    def __init__(self, slow_threshold_ms: float = 1000.0):
        self.logger = logging.getLogger("wwwroot.requests")
        self.slow_threshold_ms = slow_threshold_ms

    async def __call__(self, request: Request, ctx: WebContext, next: Handler) -> Response:
        if not self.logger.isEnabledFor(logging.INFO):
            return await next(request, ctx)

        start = time.monotonic()
        response = await next(request, ctx)
        elapsed_ms = (time.monotonic() - start) * 1000.0

        self.logger.info(
            "%s %s - %d (%.1fms)",
            request.method, request.path, response.status, elapsed_ms,
        )
        if elapsed_ms > self.slow_threshold_ms:
            self.logger.warning(
                "Slow request: %s %s took %.1fms",
                request.method, request.path, elapsed_ms,
            )
        return response
