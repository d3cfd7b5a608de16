"""Testing utilities for exercising release fetching without the network.

Provides a recording mock transport serving canned responses per URL, and a
context manager that installs an HTTPX client backed by it as the shared
client.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Union

import httpx

from ..net import configure_http_client, http_event_hooks, reset_http_client

__all__ = ["ResponseSpec", "RecordingTransport", "use_mock_http_client"]


@dataclass
class ResponseSpec:
    """Canned HTTP response served by :class:`RecordingTransport`."""

    status: int = 200
    body: Union[bytes, str] = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    def serialise_body(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")


class RecordingTransport(httpx.MockTransport):
    """Mock transport answering from a URL -> :class:`ResponseSpec` table.

    Unknown URLs receive a 404. Every request is appended to :attr:`requests`.
    """

    def __init__(
        self, responses: Optional[Mapping[str, Union[ResponseSpec, bytes, str]]] = None
    ) -> None:
        self.responses: Dict[str, ResponseSpec] = {}
        self.requests: List[httpx.Request] = []
        for url, spec in (responses or {}).items():
            self.add(url, spec)
        super().__init__(self._handle)

    def add(self, url: str, spec: Union[ResponseSpec, bytes, str]) -> None:
        if not isinstance(spec, ResponseSpec):
            spec = ResponseSpec(body=spec)
        self.responses[url] = spec

    def urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        spec = self.responses.get(str(request.url))
        if spec is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(spec.status, content=spec.serialise_body(), headers=dict(spec.headers))


@contextlib.contextmanager
def use_mock_http_client(transport: httpx.BaseTransport, **client_kwargs) -> Iterator[httpx.Client]:
    """Temporarily install an HTTPX client backed by ``transport``.

    Like the default shared client, it installs the response hooks and
    follows redirects unless ``client_kwargs`` say otherwise.
    """

    client_kwargs.setdefault("event_hooks", http_event_hooks())
    client_kwargs.setdefault("follow_redirects", True)
    client = httpx.Client(transport=transport, **client_kwargs)
    configure_http_client(client=client)
    try:
        yield client
    finally:
        reset_http_client()
        client.close()
