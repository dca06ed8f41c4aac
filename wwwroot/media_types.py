"""
Media types - extension to MIME mapping and Content-Type composition.

The table is built once, when the static stage is constructed, and is only
ever read afterwards. It is exposed through a ``MappingProxyType`` so no
caller can mutate it while requests are being served concurrently.
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional


DEFAULT_CONTENT_CHARSET = "utf-8"


class MediaType:
    """MIME type constants used by the default table."""
    TEXT_HTML = "text/html"
    TEXT_PLAIN = "text/plain"
    TEXT_CSS = "text/css"
    TEXT_JAVASCRIPT = "text/javascript"
    TEXT_CACHEMANIFEST = "text/cache-manifest"
    IMAGE_JPEG = "image/jpeg"
    IMAGE_PNG = "image/png"
    IMAGE_X_ICON = "image/x-icon"
    APPLICATION_OCTETSTREAM = "application/octet-stream"


_DEFAULT_MEDIA_TYPES: Dict[str, str] = {
    ".html": MediaType.TEXT_HTML,
    ".htm": MediaType.TEXT_HTML,
    ".txt": MediaType.TEXT_PLAIN,
    ".css": MediaType.TEXT_CSS,
    ".js": MediaType.TEXT_JAVASCRIPT,
    ".jpg": MediaType.IMAGE_JPEG,
    ".jpeg": MediaType.IMAGE_JPEG,
    ".png": MediaType.IMAGE_PNG,
    ".ico": MediaType.IMAGE_X_ICON,
    ".appcache": MediaType.TEXT_CACHEMANIFEST,
}


def build_content_type(mime_type: str, charset: str) -> str:
    """
    Compose a Content-Type header value.

    >>> build_content_type("text/html", "utf-8")
    'text/html; charset=utf-8'
    >>> build_content_type("image/png", "")
    'image/png'
    """
    value = mime_type.lower()
    if charset:
        value = f"{value}; charset={charset}"
    return value


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it carries its leading dot."""
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension


class MediaTypeTable(Mapping[str, str]):
    """
    Read-only mapping of lower-case file extension (with dot) to MIME type.

    Args:
        extra: Additional extension -> MIME entries merged over the defaults.
               Keys are normalised to lower case with a leading dot.
    """

    __slots__ = ("_types",)

    def __init__(self, extra: Optional[Mapping[str, str]] = None):
        types = dict(_DEFAULT_MEDIA_TYPES)
        for extension, mime_type in (extra or {}).items():
            key = normalize_extension(extension)
            if not key or key == ".":
                raise ValueError(f"Invalid file extension: {extension!r}")
            types[key] = mime_type.lower()
        self._types = MappingProxyType(types)

    def __getitem__(self, extension: str) -> str:
        return self._types[extension]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def lookup(self, file_name: str) -> Optional[str]:
        """Return the MIME type for ``file_name``'s extension, if known."""
        _, extension = os.path.splitext(file_name)
        return self._types.get(extension.lower())

    def content_type_for(self, file_name: str, charset: str) -> str:
        """
        Content-Type header value for a resolved file.

        Known extensions get the configured charset; anything else falls
        back to ``application/octet-stream`` with no charset.
        """
        mime_type = self.lookup(file_name)
        if mime_type is None:
            return build_content_type(MediaType.APPLICATION_OCTETSTREAM, "")
        return build_content_type(mime_type, charset)

    def __repr__(self) -> str:
        return f"MediaTypeTable({len(self)} types)"
