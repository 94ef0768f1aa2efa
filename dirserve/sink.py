"""Response sink abstraction shared by the writers and the transport."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol

from starlette.responses import Response


class ResponseSink(Protocol):
    def write_head(
        self,
        status: int,
        status_text: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None: ...

    def end(self, body: bytes = b"") -> None: ...


class BufferedResponseSink:
    """Collects a single response and hands it to Starlette afterwards."""

    def __init__(self) -> None:
        self.status: Optional[int] = None
        self.status_text: Optional[str] = None
        self.headers: Dict[str, str] = {}
        self.body: bytes = b""
        self.finished = False

    @property
    def headers_sent(self) -> bool:
        return self.status is not None

    def write_head(
        self,
        status: int,
        status_text: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        if self.headers_sent:
            raise RuntimeError("write_head called twice for one response")
        self.status = status
        self.status_text = status_text
        self.headers = dict(headers or {})

    def end(self, body: bytes = b"") -> None:
        if self.finished:
            raise RuntimeError("end called twice for one response")
        if not self.headers_sent:
            self.write_head(200)
        self.body = body or b""
        self.finished = True

    def to_response(self) -> Response:
        if not self.finished:
            raise RuntimeError("response was never completed")
        # writers own the header set; skip Starlette defaults
        response = Response(content=self.body, status_code=self.status or 200)
        response.raw_headers = [
            (name.lower().encode("latin-1"), str(value).encode("latin-1"))
            for name, value in self.headers.items()
        ]
        if self.body and "content-length" not in {k.lower() for k in self.headers}:
            response.raw_headers.append((b"content-length", str(len(self.body)).encode("latin-1")))
        return response


__all__ = ["BufferedResponseSink", "ResponseSink"]
