"""
wwwroot - Static-file pipeline stage for async Python web apps

Intercepts requests before routing and, when the path maps to a file under
the configured document root, serves it directly:

- StaticFilesMiddleware: prefix match, index document, safe lookup, content type
- Engine / MiddlewareStack: hosting pipeline with lifecycle hooks
- ASGIAdapter / create_app: ASGI 3 entry point
"""

__version__ = "0.1.0"

from .config import ConfigLoader, ServerSettings, StaticFilesConfig
from .context import WebContext
from .engine import Engine, Route, Router
from .faults import ConfigInvalidFault, Fault, FaultDomain, RouteConflictFault, Severity
from .media_types import (
    DEFAULT_CONTENT_CHARSET,
    MediaType,
    MediaTypeTable,
    build_content_type,
)
from .middleware import (
    ExceptionMiddleware,
    LoggingMiddleware,
    MiddlewareStack,
    PipelineMiddleware,
)
from .middleware_ext.static import StaticFilesMiddleware, StaticMatch
from .request import Request
from .response import Response
from .static_contents import is_static_file, send_file
from .asgi import ASGIAdapter, create_app

__all__ = [
    "__version__",
    # Config
    "ConfigLoader",
    "ServerSettings",
    "StaticFilesConfig",
    # Pipeline
    "Engine",
    "Route",
    "Router",
    "WebContext",
    "MiddlewareStack",
    "PipelineMiddleware",
    "ExceptionMiddleware",
    "LoggingMiddleware",
    # Static files
    "StaticFilesMiddleware",
    "StaticMatch",
    "MediaType",
    "MediaTypeTable",
    "DEFAULT_CONTENT_CHARSET",
    "build_content_type",
    "is_static_file",
    "send_file",
    # HTTP
    "Request",
    "Response",
    "ASGIAdapter",
    "create_app",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigInvalidFault",
    "RouteConflictFault",
]
