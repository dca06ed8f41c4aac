"""
Static contents - safe file resolution and file transmission.

``is_static_file`` is the only place where a document root and a
client-supplied path are combined. It canonicalizes the candidate with
``Path.resolve()`` (collapsing ``..`` and following symlinks) and rejects
anything that does not stay inside the resolved document root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from .context import WebContext
from .response import Response


logger = logging.getLogger("wwwroot.static")


def is_static_file(document_root: str, path_info: str) -> Tuple[bool, str]:
    """
    Resolve ``path_info`` under ``document_root``.

    Relative document roots are resolved against the current working
    directory.

    Returns:
        ``(True, absolute_path)`` when a regular file exists inside the
        document root, ``(False, "")`` otherwise (including empty root,
        directories, traversal attempts and names the OS cannot stat).
    """
    if not document_root:
        return False, ""
    if "\x00" in path_info:
        return False, ""

    relative = path_info.replace("\\", "/").lstrip("/")
    try:
        root = Path(document_root).resolve()
        candidate = (root / relative).resolve()
    except (OSError, RuntimeError):
        return False, ""

    try:
        candidate.relative_to(root)
    except ValueError:
        logger.warning("Path traversal attempt blocked: %r", path_info)
        return False, ""

    # over-long names raise ENAMETOOLONG on older interpreters
    try:
        if not candidate.is_file():
            return False, ""
    except OSError:
        return False, ""

    return True, str(candidate)


def send_file(file_name: str, content_type: str, ctx: WebContext) -> None:
    """
    Write ``file_name`` as the response body of ``ctx``.

    ``HEAD`` requests get the same headers with an empty body. Filesystem
    errors (permission denied, file vanished) propagate to the caller.
    """
    include_body = ctx.request.method != "HEAD"
    ctx.response = Response.file(
        file_name,
        media_type=content_type,
        include_body=include_body,
    )
