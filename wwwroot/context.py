"""
Per-request context handed to every pipeline stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .request import Request
from .response import Response


@dataclass
class WebContext:
    """
    Request context provided to middlewares and actions.

    Attributes:
        request: The HTTP request
        response: Response produced by whichever stage handled the request
        state: Additional per-request state
    """

    request: Request
    response: Optional[Response] = None
    state: Dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def method(self) -> str:
        return self.request.method
