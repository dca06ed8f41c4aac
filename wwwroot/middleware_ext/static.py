"""
Static File Middleware - serves files from a document root before routing.

Decision flow for one request:

    path info ──► prefix match? ──no──► pass through (not handled)
                      │yes
                      ▼
                strip prefix (no-op for "/")
                      │
                      ▼
        root path and index document configured?
             │yes                          │no
             ▼                             │
     <root>/<index> exists? ──yes──► send  │
             │no                           │
             ▼                             ▼
        <root>/<relative path> exists inside root? ──yes──► send
                      │no
                      ▼
                 pass through

Only ``on_before_routing`` does any work; the action hooks are inherited
no-ops. All configuration and the media-type table are fixed at
construction, so one instance can serve concurrent requests without
locking.
"""

from __future__ import annotations

import logging
from typing import Mapping, NamedTuple, Optional

from wwwroot.config import StaticFilesConfig
from wwwroot.context import WebContext
from wwwroot.media_types import DEFAULT_CONTENT_CHARSET, MediaTypeTable
from wwwroot.middleware import PipelineMiddleware
from wwwroot.static_contents import is_static_file, send_file


class StaticMatch(NamedTuple):
    """A request path resolved to a servable file."""
    file_name: str
    content_type: str
    is_index: bool = False


class StaticFilesMiddleware(PipelineMiddleware):
    """
    Serve files under ``document_root`` for paths below ``url_prefix``.

    Args:
        url_prefix: URL segment designating static content (matched
                    case-insensitively). ``"/"`` matches every path.
        document_root: Filesystem root. Empty disables static serving.
        index_document: File served for ``""`` / ``"/"`` relative paths.
                        Empty disables the index fallback.
        charset: Charset appended to content types found in the media table.
        media_types: Extra extension -> MIME entries for the media table.
    """

    def __init__(
        self,
        url_prefix: str = "/",
        document_root: str = "./www",
        index_document: str = "index.html",
        charset: str = DEFAULT_CONTENT_CHARSET,
        *,
        media_types: Optional[Mapping[str, str]] = None,
    ):
        self._config = StaticFilesConfig(
            url_prefix=url_prefix,
            document_root=document_root,
            index_document=index_document,
            charset=charset,
        )
        self._media_types = MediaTypeTable(media_types)
        self._prefix_folded = url_prefix.casefold()
        self.logger = logging.getLogger("wwwroot.static")

    @classmethod
    def from_config(
        cls,
        config: StaticFilesConfig,
        *,
        media_types: Optional[Mapping[str, str]] = None,
    ) -> "StaticFilesMiddleware":
        return cls(
            url_prefix=config.url_prefix,
            document_root=config.document_root,
            index_document=config.index_document,
            charset=config.charset,
            media_types=media_types,
        )

    # ── Read-only configuration ──────────────────────────────────────────

    @property
    def config(self) -> StaticFilesConfig:
        return self._config

    @property
    def url_prefix(self) -> str:
        return self._config.url_prefix

    @property
    def document_root(self) -> str:
        return self._config.document_root

    @property
    def index_document(self) -> str:
        return self._config.index_document

    @property
    def charset(self) -> str:
        return self._config.charset

    @property
    def media_types(self) -> MediaTypeTable:
        return self._media_types

    # ── Decision steps ───────────────────────────────────────────────────

    def match_path(self, path_info: str) -> Optional[str]:
        """
        Return the path relative to the static prefix, or None when the
        path is not under the prefix.
        """
        if not path_info.casefold().startswith(self._prefix_folded):
            return None
        if self.url_prefix == "/":
            return path_info
        return path_info[self._matched_length(path_info):]

    def _matched_length(self, path_info: str) -> int:
        # case folding can change the length (e.g. "ß" -> "ss"), so count
        # the characters of path_info that fold onto the prefix
        folded = ""
        for index, char in enumerate(path_info):
            if len(folded) >= len(self._prefix_folded):
                return index
            folded += char.casefold()
        return len(path_info)

    @staticmethod
    def is_root_path(relative_path: str) -> bool:
        return relative_path in ("", "/")

    def content_type_for(self, file_name: str) -> str:
        return self._media_types.content_type_for(file_name, self.charset)

    def resolve(self, path_info: str) -> Optional[StaticMatch]:
        """
        Decide whether ``path_info`` maps to a file this stage would serve.

        Pure lookup: nothing is written to any response.
        """
        relative_path = self.match_path(path_info)
        if relative_path is None:
            return None

        if self.index_document and self.is_root_path(relative_path):
            exists, file_name = is_static_file(self.document_root, self.index_document)
            if exists:
                return StaticMatch(file_name, self.content_type_for(file_name), is_index=True)

        exists, file_name = is_static_file(self.document_root, relative_path)
        if exists:
            return StaticMatch(file_name, self.content_type_for(file_name))

        return None

    # ── Lifecycle hooks ──────────────────────────────────────────────────

    async def on_before_routing(self, ctx: WebContext) -> bool:
        path_info = ctx.request.path
        match = self.resolve(path_info)
        if match is None:
            self.logger.debug("Pass through: %s", path_info)
            return False

        send_file(match.file_name, match.content_type, ctx)
        self.logger.debug(
            "Served %s -> %s (%s)", path_info, match.file_name, match.content_type,
        )
        return True

    def __repr__(self) -> str:
        return (
            f"StaticFilesMiddleware(url_prefix={self.url_prefix!r}, "
            f"document_root={self.document_root!r}, "
            f"index_document={self.index_document!r}, charset={self.charset!r})"
        )
