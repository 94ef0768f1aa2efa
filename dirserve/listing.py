"""HTML directory listings."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .fsprobe import DirEntry

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


@dataclass(frozen=True, slots=True)
class ListingRow:
    href: str
    label: str
    is_directory: bool


def _sort_key(entry: DirEntry) -> tuple[int, str, str]:
    return (0 if entry.is_directory else 1, entry.name.casefold(), entry.name.swapcase())


def sort_entries(entries: Iterable[DirEntry]) -> List[DirEntry]:
    """Directories first, then by name; the input is left untouched."""

    return sorted(entries, key=_sort_key)


def relative_url_path(root_dir: str, directory: str) -> str:
    relative = "" if directory == root_dir else os.path.relpath(directory, root_dir)
    return ("/" + relative).replace("\\", "/")


def build_rows(relative_path: str, entries: Iterable[DirEntry]) -> List[ListingRow]:
    rows: List[ListingRow] = []
    for entry in sort_entries(entries):
        suffix = "/" if entry.is_directory else ""
        href = quote(posixpath.join(relative_path, entry.name)) + suffix
        rows.append(ListingRow(href=href, label=entry.name + suffix, is_directory=entry.is_directory))
    return rows


def render_listing(root_dir: str, directory: str, entries: Iterable[DirEntry]) -> bytes:
    relative_path = relative_url_path(root_dir, directory)
    template = _env.get_template("listing.html")
    html = template.render(relative_path=relative_path, entries=build_rows(relative_path, entries))
    return html.encode("utf-8")


__all__ = [
    "ListingRow",
    "TEMPLATES_DIR",
    "build_rows",
    "relative_url_path",
    "render_listing",
    "sort_entries",
]
