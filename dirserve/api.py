from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from logging import StreamHandler
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config import AppSettings, ServerOptions, options_from_env, settings_from_env
from .handler import RequestContext, StaticHandler, create_server
from .sink import BufferedResponseSink

logger = logging.getLogger("dirserve.api")
_access_logger = logging.getLogger("dirserve.access")

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_RAW_PATH_SAFE = "/%:@!$&'()*+,;=[]"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _init_logging(level_name: str = "INFO") -> None:
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("dirserve").setLevel(level)

    for logger_name in ("uvicorn", "uvicorn.access"):
        lg = logging.getLogger(logger_name)
        lg.setLevel(level)
        if not lg.handlers:
            handler = StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            lg.addHandler(handler)


def _raw_url(request: Request) -> str:
    scope = request.scope
    raw_path = scope.get("raw_path")
    if raw_path:
        # re-encode bytes a client sent unescaped so the resolver sees UTF-8
        path = quote(raw_path, safe=_RAW_PATH_SAFE)
    else:
        path = quote(scope.get("path") or "")
    query = scope.get("query_string") or b""
    if query:
        path = f"{path}?{query.decode('latin-1')}"
    return path


def request_context(request: Request) -> RequestContext:
    return RequestContext.build(request.method, _raw_url(request), request.headers)


def create_app(
    options: Optional[ServerOptions] = None,
    settings: Optional[AppSettings] = None,
) -> FastAPI:
    options = options if options is not None else options_from_env()
    settings = settings if settings is not None else settings_from_env()

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        handler = await create_server(options)
        app.state.handler = handler
        logger.info(
            "serving root=%s etag=%s expires_ms=%s",
            handler.config.root_dir,
            handler.config.use_etag,
            handler.config.expires_ms,
        )
        yield

    app = FastAPI(
        title="dirserve",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=_lifespan,
    )
    app.state.handler = None

    if settings.metrics_path:

        @app.get(settings.metrics_path, include_in_schema=False)
        async def metrics_endpoint() -> Response:
            data = generate_latest()
            return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def serve(request: Request, path: str) -> Response:
        handler: StaticHandler | None = request.app.state.handler
        if handler is None:
            raise RuntimeError("static handler used before startup")
        sink = BufferedResponseSink()
        await handler.handle(request_context(request), sink)
        return sink.to_response()

    async def _log_requests(request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            took = (time.time() - start) * 1000.0
            _access_logger.exception(
                "%s %s -> 500 %.1fms",
                request.method,
                request.url.path,
                took,
            )
            return JSONResponse({"detail": "internal_error"}, status_code=500)

        took = (time.time() - start) * 1000.0
        _access_logger.info(
            "%s %s -> %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            took,
        )
        return response

    app.middleware("http")(_log_requests)
    return app


__all__ = ["create_app", "request_context", "_init_logging"]
