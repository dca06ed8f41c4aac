"""
Config system - typed, immutable settings for the static stage and server.

Sources merge with precedence:
    overrides > environment variables > .env file > defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

from .faults import ConfigInvalidFault
from .media_types import DEFAULT_CONTENT_CHARSET


DEFAULT_URL_PREFIX = "/"
DEFAULT_DOCUMENT_ROOT = "./www"
DEFAULT_INDEX_DOCUMENT = "index.html"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "info"


@dataclass(frozen=True)
class StaticFilesConfig:
    """
    Settings of the static-file stage.

    Attributes:
        url_prefix: URL segment under which static serving is attempted
        document_root: Filesystem root for static content; empty disables serving
        index_document: Default document for root requests; empty disables it
        charset: Charset appended to content types found in the media table
    """
    url_prefix: str = DEFAULT_URL_PREFIX
    document_root: str = DEFAULT_DOCUMENT_ROOT
    index_document: str = DEFAULT_INDEX_DOCUMENT
    charset: str = DEFAULT_CONTENT_CHARSET

    def __post_init__(self) -> None:
        if not self.url_prefix.startswith("/"):
            raise ConfigInvalidFault("url_prefix", "must start with '/'")
        index = self.index_document
        if index and ("/" in index or "\\" in index or index in (".", "..")):
            raise ConfigInvalidFault("index_document", "must be a plain file name")
        if any(ch in self.charset for ch in " ;,\t"):
            raise ConfigInvalidFault("charset", "must be a bare charset token")


@dataclass(frozen=True)
class ServerSettings:
    """Bind address and log level for the bundled server."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if not 1 <= self.port <= 65535:
            raise ConfigInvalidFault("port", f"must be in [1, 65535], got {self.port}")


class ConfigLoader:
    """
    Loads and merges configuration from the environment, an optional .env
    file and explicit overrides.

    Keys are the lower-cased variable names without the prefix, e.g.
    ``WWWROOT_DOCUMENT_ROOT`` becomes ``document_root``.
    """

    def __init__(self, env_prefix: str = "WWWROOT_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        env_file: Optional[str] = None,
        env_prefix: str = "WWWROOT_",
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ConfigLoader":
        loader = cls(env_prefix=env_prefix)

        if env_file:
            loader._merge_prefixed(dotenv_values(env_file))

        loader._merge_prefixed(os.environ if environ is None else environ)

        if overrides:
            for key, value in overrides.items():
                if value is not None:
                    loader.config_data[key] = value

        return loader

    def _merge_prefixed(self, values: Mapping[str, Optional[str]]) -> None:
        for key, value in values.items():
            if value is None or not key.startswith(self.env_prefix):
                continue
            self.config_data[key[len(self.env_prefix):].lower()] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.config_data.get(key, default)

    def static_files_config(self) -> StaticFilesConfig:
        kwargs = {
            f.name: str(self.config_data[f.name])
            for f in fields(StaticFilesConfig)
            if f.name in self.config_data
        }
        return StaticFilesConfig(**kwargs)

    def server_settings(self) -> ServerSettings:
        raw_port = self.config_data.get("port", DEFAULT_PORT)
        try:
            port = int(raw_port)
        except (TypeError, ValueError):
            raise ConfigInvalidFault("port", f"not an integer: {raw_port!r}")
        return ServerSettings(
            host=str(self.config_data.get("host", DEFAULT_HOST)),
            port=port,
            log_level=str(self.config_data.get("log_level", DEFAULT_LOG_LEVEL)).lower(),
        )

    def to_dict(self) -> dict:
        return self.config_data.copy()
