"""Executable entrypoint for the static file server.

Usage:
    python -m dirserve [ROOT] [--host HOST] [--port PORT]
                       [--no-etag] [--expires MS] [--metrics-path PATH]
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import List, Optional

import uvicorn

from .api import _init_logging, create_app
from .config import options_from_env, settings_from_env


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dirserve", description="Serve a directory over HTTP")
    parser.add_argument("root", nargs="?", help="directory to serve (default: $DIRSERVE_ROOT or cwd)")
    parser.add_argument("--host", help="bind address")
    parser.add_argument("--port", type=int, help="bind port")
    parser.add_argument("--no-etag", action="store_true", help="disable ETag and 304 handling")
    parser.add_argument("--expires", type=int, metavar="MS", help="Expires offset in ms, 0 disables")
    parser.add_argument("--metrics-path", help="expose Prometheus metrics on this path")
    parser.add_argument("--log-level", help="logging level (default: $LOG_LEVEL or INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    options = options_from_env()
    if args.root:
        options = replace(options, root_dir=args.root)
    if args.no_etag:
        options = replace(options, etag=False)
    if args.expires is not None:
        options = replace(options, expires=args.expires)

    settings = settings_from_env()
    if args.host:
        settings = replace(settings, host=args.host)
    if args.port is not None:
        settings = replace(settings, port=args.port)
    if args.metrics_path:
        settings = replace(settings, metrics_path=args.metrics_path)
    if args.log_level:
        settings = replace(settings, log_level=args.log_level.upper())

    _init_logging(settings.log_level)
    app = create_app(options, settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
