from __future__ import annotations

import os

import pytest

from dirserve import fsprobe
from dirserve.config import ServerConfig
from dirserve.resolver import (
    DirectoryListing,
    FileTarget,
    NotFound,
    Redirect,
    canonical_directory_path,
    is_contained,
    request_pathname,
    resolve,
)


@pytest.mark.anyio
@pytest.mark.parametrize("method", ["POST", "HEAD", "PUT", "DELETE", "get"])
async def test_non_get_is_bad_request(config, method):
    assert await resolve(config, method, "/a.txt") == NotFound("bad-request")


@pytest.mark.anyio
async def test_empty_url_is_bad_request(config):
    assert await resolve(config, "GET", "") == NotFound("bad-request")


@pytest.mark.anyio
async def test_url_without_path_is_rejected(config):
    assert await resolve(config, "GET", "?x=1") == NotFound("no-path")


@pytest.mark.anyio
@pytest.mark.parametrize(
    "url",
    ["/../../etc/passwd", "/sub/../../etc/passwd", "/%2e%2e/%2e%2e/etc/passwd", "/..%2f..%2fetc%2fpasswd"],
)
async def test_traversal_is_blocked(config, url):
    assert await resolve(config, "GET", url) == NotFound("escape")


@pytest.mark.anyio
async def test_prefix_sibling_is_not_contained(site, config):
    sibling = site.parent / (site.name + "evil")
    sibling.mkdir()
    (sibling / "secret.txt").write_bytes(b"secret")
    result = await resolve(config, "GET", f"/../{sibling.name}/secret.txt")
    assert result == NotFound("escape")


@pytest.mark.anyio
async def test_existing_file_is_served(site, config):
    result = await resolve(config, "GET", "/a.txt?cache=bust#frag")
    assert isinstance(result, FileTarget)
    assert result.path == str(site / "a.txt")
    assert result.extension == ".txt"
    assert result.content == b"hello world\n"


@pytest.mark.anyio
async def test_percent_encoded_name_is_decoded(site, config):
    (site / "with space.txt").write_bytes(b"spaced")
    result = await resolve(config, "GET", "/with%20space.txt")
    assert isinstance(result, FileTarget)
    assert result.content == b"spaced"


@pytest.mark.anyio
async def test_missing_path_is_not_found(config):
    assert await resolve(config, "GET", "/nope.txt") == NotFound("missing")


@pytest.mark.anyio
async def test_directory_without_slash_redirects(config):
    assert await resolve(config, "GET", "/sub") == Redirect("/sub/")


@pytest.mark.anyio
async def test_non_canonical_directory_forms_redirect(config):
    assert await resolve(config, "GET", "/docs/./") == Redirect("/docs/")
    assert await resolve(config, "GET", "//docs/") == Redirect("/docs/")
    assert await resolve(config, "GET", "/sub/../docs") == Redirect("/docs/")


@pytest.mark.anyio
async def test_directory_index_is_served(site, config):
    result = await resolve(config, "GET", "/sub/")
    assert isinstance(result, FileTarget)
    assert result.path == os.path.join(str(site / "sub"), "index.html")
    assert result.extension == ".html"
    assert result.content == b"<h1>sub index</h1>"


@pytest.mark.anyio
async def test_directory_without_index_lists_entries(site, config):
    result = await resolve(config, "GET", "/docs/")
    assert isinstance(result, DirectoryListing)
    assert result.path == str(site / "docs")
    assert sorted(entry.name for entry in result.entries) == ["a", "b.txt"]


@pytest.mark.anyio
async def test_root_is_listed_at_slash(site, config):
    result = await resolve(config, "GET", "/")
    assert isinstance(result, DirectoryListing)
    assert result.path == str(site)


@pytest.mark.anyio
async def test_unreadable_directory_is_not_found(config, monkeypatch):
    async def _fail(path):
        return None

    monkeypatch.setattr(fsprobe, "read_directory", _fail)
    assert await resolve(config, "GET", "/docs/") == NotFound("empty-read-failed")


def test_canonical_directory_path():
    assert canonical_directory_path("/srv/www", "/srv/www") == "/"
    assert canonical_directory_path("/srv/www", "/srv/www/sub") == "/sub/"
    assert canonical_directory_path("/srv/www", "/srv/www/a/b") == "/a/b/"


def test_is_contained_requires_separator_boundary():
    assert is_contained("/srv/www", "/srv/www")
    assert is_contained("/srv/www", "/srv/www/a.txt")
    assert not is_contained("/srv/www", "/srv/wwwevil")
    assert not is_contained("/srv/www", "/etc/passwd")
    assert is_contained("/", "/etc/passwd")


def test_request_pathname_drops_query_and_fragment():
    assert request_pathname("/a%20b.txt?x=1#top") == "/a b.txt"
    assert request_pathname("?only=query") == ""


@pytest.mark.anyio
async def test_resolve_with_filesystem_root(tmp_path):
    root_config = ServerConfig(root_dir=os.sep, use_etag=False, expires_ms=0)
    target = tmp_path / "f.txt"
    target.write_bytes(b"x")
    result = await resolve(root_config, "GET", str(target))
    assert isinstance(result, FileTarget)
    assert result.content == b"x"


@pytest.mark.anyio
@pytest.mark.parametrize("url", ["/a.txt/", "/sub/index.html/", "/app.js//"])
async def test_file_with_trailing_slash_is_not_found(config, url):
    assert await resolve(config, "GET", url) == NotFound("missing")
