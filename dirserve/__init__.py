"""Static file and directory listing server."""

from .config import ConfigError, ServerConfig, ServerOptions
from .handler import RequestContext, StaticHandler, create_server

__all__ = [
    "ConfigError",
    "RequestContext",
    "ServerConfig",
    "ServerOptions",
    "StaticHandler",
    "create_server",
]
