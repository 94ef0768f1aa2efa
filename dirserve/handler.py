"""Per-request entry point wiring the resolver to the response writers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping

from . import fsprobe
from .config import ConfigError, ServerConfig, ServerOptions, build_config
from .metrics import INTERNAL_ERRORS_TOTAL, NOT_FOUND_TOTAL, RESPONSES_TOTAL
from .resolver import DirectoryListing, FileTarget, NotFound, Redirect, ResolvedTarget, resolve
from .sink import ResponseSink
from .writers import (
    write_directory,
    write_file,
    write_internal_error,
    write_not_found,
    write_redirect,
)

logger = logging.getLogger("dirserve.handler")


@dataclass(frozen=True, slots=True)
class RequestContext:
    method: str
    raw_url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, method: str, raw_url: str, headers: Mapping[str, str] | None = None) -> "RequestContext":
        lowered: Dict[str, str] = {str(k).lower(): str(v) for k, v in (headers or {}).items()}
        return cls(method=method, raw_url=raw_url, headers=lowered)


class StaticHandler:
    """Serves files below ``config.root_dir``.

    Holds nothing but the immutable config, so a single instance is shared by
    every concurrent request.
    """

    def __init__(self, config: ServerConfig) -> None:
        self.config = config

    async def dispatch(self, request: RequestContext, sink: ResponseSink, target: ResolvedTarget) -> int:
        headers = dict(request.headers)
        if isinstance(target, FileTarget):
            return write_file(headers, sink, self.config, target.extension, target.content)
        if isinstance(target, DirectoryListing):
            return write_directory(headers, sink, self.config, target.path, target.entries)
        if isinstance(target, Redirect):
            return write_redirect(sink, target.location)
        if isinstance(target, NotFound):
            NOT_FOUND_TOTAL.labels(target.reason).inc()
            logger.debug("not_found reason=%s url=%s", target.reason, request.raw_url)
            return write_not_found(sink, target.reason)
        raise TypeError(f"unexpected resolver result: {target!r}")

    async def handle(self, request: RequestContext, sink: ResponseSink) -> None:
        kind = "error"
        try:
            target = await resolve(self.config, request.method, request.raw_url)
            kind = type(target).__name__
            status = await self.dispatch(request, sink, target)
        except Exception:
            INTERNAL_ERRORS_TOTAL.inc()
            logger.exception("request_failed method=%s url=%s", request.method, request.raw_url)
            if getattr(sink, "headers_sent", False):
                if not getattr(sink, "finished", False):
                    sink.end()
                return
            status = write_internal_error(sink)
            kind = "error"
        RESPONSES_TOTAL.labels(str(status), kind).inc()


async def create_server(options: ServerOptions | None = None) -> StaticHandler:
    config = build_config(options)
    if not await fsprobe.exists(config.root_dir):
        raise ConfigError(f"root directory {config.root_dir} does not exist")
    return StaticHandler(config)


__all__ = ["RequestContext", "StaticHandler", "create_server"]
