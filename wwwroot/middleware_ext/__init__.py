"""
Extended middleware components for wwwroot.

Static Files:
- StaticFilesMiddleware: serves files from a document root before routing
"""

from .static import StaticFilesMiddleware, StaticMatch

__all__ = [
    "StaticFilesMiddleware",
    "StaticMatch",
]
