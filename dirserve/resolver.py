"""Map a request onto exactly one response kind.

The resolver never raises for ordinary misses: absent files, unreadable
directories and traversal attempts all come back as :class:`NotFound`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Union
from urllib.parse import unquote, urlsplit

from . import fsprobe
from .config import ServerConfig
from .fsprobe import DirEntry

INDEX_FILE = "index.html"


@dataclass(frozen=True, slots=True)
class NotFound:
    reason: str


@dataclass(frozen=True, slots=True)
class Redirect:
    location: str


@dataclass(frozen=True, slots=True)
class FileTarget:
    path: str
    extension: str
    content: bytes


@dataclass(frozen=True, slots=True)
class DirectoryListing:
    path: str
    entries: List[DirEntry]


ResolvedTarget = Union[NotFound, Redirect, FileTarget, DirectoryListing]


def request_pathname(raw_url: str) -> str:
    """Return the percent-decoded path of ``raw_url`` or ``""``.

    Origin-form targets are cut at ``?``/``#`` by hand: ``urlsplit`` would
    read a leading ``//segment`` as a network location.
    """

    if raw_url.startswith("/"):
        path = raw_url.split("#", 1)[0].split("?", 1)[0]
    else:
        try:
            path = urlsplit(raw_url).path
        except ValueError:
            return ""
    return unquote(path)


def is_contained(root_dir: str, candidate: str) -> bool:
    if candidate == root_dir:
        return True
    prefix = root_dir if root_dir.endswith(os.sep) else root_dir + os.sep
    return candidate.startswith(prefix)


def canonical_directory_path(root_dir: str, directory: str) -> str:
    """URL path a directory must be requested under, with a trailing slash."""

    relative = "" if directory == root_dir else os.path.relpath(directory, root_dir)
    expected = relative.replace("\\", "/") + "/"
    if not expected.startswith("/"):
        expected = "/" + expected
    return expected


async def resolve(config: ServerConfig, method: str, raw_url: str) -> ResolvedTarget:
    if method != "GET" or not raw_url:
        return NotFound("bad-request")

    pathname = request_pathname(raw_url)
    if not pathname:
        return NotFound("no-path")

    root_dir = config.root_dir
    candidate = os.path.normpath(os.path.join(root_dir, pathname.lstrip("/\\")))
    if not is_contained(root_dir, candidate):
        return NotFound("escape")

    # a trailing slash only ever names a directory
    if not pathname.endswith("/"):
        content = await fsprobe.read_file(candidate)
        if content is not None:
            return FileTarget(candidate, os.path.splitext(candidate)[1], content)

    info = await fsprobe.stat_directory(candidate)
    if info is None or not info.is_directory:
        return NotFound("missing")

    expected = canonical_directory_path(root_dir, candidate)
    if pathname != expected:
        return Redirect(expected)

    index_path = os.path.join(candidate, INDEX_FILE)
    index_content = await fsprobe.read_file(index_path)
    if index_content is not None:
        return FileTarget(index_path, ".html", index_content)

    entries = await fsprobe.read_directory(candidate)
    if entries is not None:
        return DirectoryListing(candidate, entries)
    return NotFound("empty-read-failed")


__all__ = [
    "DirectoryListing",
    "FileTarget",
    "INDEX_FILE",
    "NotFound",
    "Redirect",
    "ResolvedTarget",
    "canonical_directory_path",
    "is_contained",
    "request_pathname",
    "resolve",
]
