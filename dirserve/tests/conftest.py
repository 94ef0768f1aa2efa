from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:  # pragma: no cover - path setup
    sys.path.insert(0, str(ROOT_DIR))

from dirserve.config import ServerConfig


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A small document root::

        www/
          a.txt
          app.js
          data.bin
          sub/
            index.html
          docs/
            b.txt
            a/
              note.txt
    """

    root = tmp_path / "www"
    root.mkdir()
    (root / "a.txt").write_bytes(b"hello world\n")
    (root / "app.js").write_text("console.log(1);\n", encoding="utf-8")
    (root / "data.bin").write_bytes(b"\x00\x01\x02")
    sub = root / "sub"
    sub.mkdir()
    (sub / "index.html").write_bytes(b"<h1>sub index</h1>")
    docs = root / "docs"
    docs.mkdir()
    (docs / "b.txt").write_bytes(b"b")
    (docs / "a").mkdir()
    (docs / "a" / "note.txt").write_bytes(b"note")
    return root


@pytest.fixture
def config(site: Path) -> ServerConfig:
    return ServerConfig(root_dir=str(site), use_etag=True, expires_ms=5000)
