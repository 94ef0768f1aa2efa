"""Non-raising async filesystem probes.

Every probe runs its blocking call in a worker thread and folds any I/O
failure into a negative result, so callers only branch on presence.
"""

from __future__ import annotations

import asyncio
import os
import stat
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class DirInfo:
    is_directory: bool


@dataclass(frozen=True, slots=True)
class DirEntry:
    name: str
    is_directory: bool


_PROBE_ERRORS = (OSError, ValueError)


async def exists(path: str) -> bool:
    try:
        return await asyncio.to_thread(os.path.exists, path)
    except _PROBE_ERRORS:
        return False


def _stat(path: str) -> DirInfo:
    st = os.stat(path)
    return DirInfo(is_directory=stat.S_ISDIR(st.st_mode))


async def stat_directory(path: str) -> Optional[DirInfo]:
    try:
        return await asyncio.to_thread(_stat, path)
    except _PROBE_ERRORS:
        return None


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()


async def read_file(path: str) -> Optional[bytes]:
    try:
        return await asyncio.to_thread(_read_bytes, path)
    except _PROBE_ERRORS:
        return None


def _scan(path: str) -> List[DirEntry]:
    entries: List[DirEntry] = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            entries.append(DirEntry(name=entry.name, is_directory=is_dir))
    return entries


async def read_directory(path: str) -> Optional[List[DirEntry]]:
    try:
        return await asyncio.to_thread(_scan, path)
    except _PROBE_ERRORS:
        return None


__all__ = [
    "DirEntry",
    "DirInfo",
    "exists",
    "read_directory",
    "read_file",
    "stat_directory",
]
