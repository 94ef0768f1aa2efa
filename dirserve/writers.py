"""Emit the response kinds produced by the resolver."""

from __future__ import annotations

import hashlib
import logging
import time
from email.utils import formatdate
from typing import Dict, Iterable, Optional
from urllib.parse import quote

from .config import ServerConfig
from .fsprobe import DirEntry
from .listing import render_listing
from .sink import ResponseSink

logger = logging.getLogger("dirserve.writers")

MIME_TYPES: Dict[str, Optional[str]] = {
    ".html": "text/html; charset=utf-8",
    ".htm": "text/html; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".json": "application/json",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".ttf": "font/ttf",
    ".txt": "text/plain; charset=utf-8",
    ".wasm": "application/wasm",
    # source maps are served without a content type
    ".map": None,
}

INTERNAL_ERROR_BODY = b"Internal Server Error"


def content_type_for(extension: str) -> Optional[str]:
    ext = (extension or "").lower()
    if ext in MIME_TYPES:
        return MIME_TYPES[ext]
    logger.warning("unhandled_mime ext=%s", ext or "<none>")
    return None


def compute_etag(content: bytes) -> str:
    return '"%s"' % hashlib.sha256(content).hexdigest()


def _strip_weak(tag: str) -> str:
    tag = tag.strip()
    if tag[:2] in ("W/", "w/"):
        tag = tag[2:]
    return tag


def etag_matches(header: Optional[str], etag: str) -> bool:
    """Match ``If-None-Match`` against ``etag``.

    Accepts a comma separated list, weak validators and ``*``. A bare hex
    digest without quotes also matches so clients that strip quotes still
    get their 304.
    """

    if not header:
        return False
    bare = etag.strip('"')
    for candidate in header.split(","):
        candidate = _strip_weak(candidate)
        if candidate == "*" or candidate == etag or candidate == bare:
            return True
    return False


def http_date(expires_ms: int, now: Optional[float] = None) -> str:
    ts = (time.time() if now is None else now) + expires_ms / 1000.0
    return formatdate(ts, usegmt=True)


def write_file(
    headers_in: Dict[str, str],
    sink: ResponseSink,
    config: ServerConfig,
    extension: str,
    content: bytes,
) -> int:
    headers: Dict[str, str] = {}
    content_type = content_type_for(extension)
    if content_type:
        headers["Content-Type"] = content_type

    if config.expires_ms > 0:
        headers["Expires"] = http_date(config.expires_ms)

    if config.use_etag:
        etag = compute_etag(content)
        headers["ETag"] = etag
        if etag_matches(headers_in.get("if-none-match"), etag):
            sink.write_head(304, "Not Modified", headers)
            sink.end()
            return 304

    headers["Content-Length"] = str(len(content))
    sink.write_head(200, "OK", headers)
    sink.end(content)
    return 200


def write_directory(
    headers_in: Dict[str, str],
    sink: ResponseSink,
    config: ServerConfig,
    directory: str,
    entries: Iterable[DirEntry],
) -> int:
    body = render_listing(config.root_dir, directory, entries)
    return write_file(headers_in, sink, config, ".html", body)


def write_redirect(sink: ResponseSink, location: str) -> int:
    encoded = quote(location)
    sink.write_head(302, "Found", {"Location": encoded})
    sink.end(f"Location: {encoded}".encode("utf-8"))
    return 302


def write_not_found(sink: ResponseSink, reason: str = "") -> int:
    body = "Not found - %s" % reason if reason else "Not found"
    sink.write_head(404, "Not Found")
    sink.end(body.encode("utf-8"))
    return 404


def write_internal_error(sink: ResponseSink) -> int:
    sink.write_head(500, "Internal Server Error")
    sink.end(INTERNAL_ERROR_BODY)
    return 500


__all__ = [
    "INTERNAL_ERROR_BODY",
    "MIME_TYPES",
    "compute_etag",
    "content_type_for",
    "etag_matches",
    "http_date",
    "write_directory",
    "write_file",
    "write_internal_error",
    "write_not_found",
    "write_redirect",
]
