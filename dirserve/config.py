"""Configuration helpers for the static file server."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Union


DEFAULT_EXPIRES_MS = 5 * 1000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}


class ConfigError(ValueError):
    """Raised when the server cannot be constructed from the given options."""


def _coerce_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip() or default)
    except ValueError:
        return default


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    cleaned = value.strip().lower()
    if cleaned in _TRUE_VALUES:
        return True
    if cleaned in _FALSE_VALUES:
        return False
    return default


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


@dataclass(frozen=True, slots=True)
class ServerOptions:
    """User-facing options; ``None`` means "use the default"."""

    root_dir: Optional[str] = None
    etag: Optional[bool] = None
    expires: Union[int, bool, None] = None


@dataclass(frozen=True, slots=True)
class ServerConfig:
    root_dir: str
    use_etag: bool
    expires_ms: int


@dataclass(frozen=True, slots=True)
class AppSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    metrics_path: Optional[str] = None
    log_level: str = "INFO"


def normalize_root(raw: str | None) -> str:
    candidate = raw if raw else os.getcwd()
    return os.path.normpath(os.path.abspath(candidate))


def _resolve_expires(raw: Union[int, bool, None]) -> int:
    if raw is None:
        return DEFAULT_EXPIRES_MS
    if raw is False:
        return 0
    if raw is True:
        return DEFAULT_EXPIRES_MS
    value = int(raw)
    if value < 0:
        raise ConfigError(f"expires must be >= 0, got {value}")
    return value


def build_config(options: ServerOptions | None = None) -> ServerConfig:
    """Turn options into an immutable :class:`ServerConfig`.

    Only shape validation happens here; the existence check for the root
    directory is asynchronous and lives in :func:`dirserve.handler.create_server`.
    """

    options = options or ServerOptions()
    return ServerConfig(
        root_dir=normalize_root(options.root_dir),
        use_etag=True if options.etag is None else bool(options.etag),
        expires_ms=_resolve_expires(options.expires),
    )


def options_from_env() -> ServerOptions:
    expires_raw = _clean(os.getenv("DIRSERVE_EXPIRES_MS"))
    return ServerOptions(
        root_dir=_clean(os.getenv("DIRSERVE_ROOT")),
        etag=_coerce_bool(os.getenv("DIRSERVE_ETAG"), True),
        expires=None if expires_raw is None else _coerce_int(expires_raw, DEFAULT_EXPIRES_MS),
    )


def settings_from_env() -> AppSettings:
    return AppSettings(
        host=_clean(os.getenv("DIRSERVE_HOST")) or DEFAULT_HOST,
        port=_coerce_int(os.getenv("DIRSERVE_PORT"), DEFAULT_PORT),
        metrics_path=_clean(os.getenv("DIRSERVE_METRICS_PATH")),
        log_level=(_clean(os.getenv("LOG_LEVEL")) or "INFO").upper(),
    )


__all__ = [
    "AppSettings",
    "ConfigError",
    "DEFAULT_EXPIRES_MS",
    "ServerConfig",
    "ServerOptions",
    "build_config",
    "normalize_root",
    "options_from_env",
    "settings_from_env",
]
