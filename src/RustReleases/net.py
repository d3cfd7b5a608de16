# === NAVMAP v1 ===
# {
#   "module": "RustReleases.net",
#   "purpose": "Provide the shared HTTPX client used to download index documents",
#   "sections": [
#     {"id": "constants", "name": "Constants & globals", "anchor": "CONST", "kind": "constants"},
#     {"id": "helpers", "name": "Client construction helpers", "anchor": "HELP", "kind": "helpers"},
#     {"id": "api", "name": "Public API", "anchor": "API", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Shared HTTPX client used for every upstream GET."""

from __future__ import annotations

import contextlib
import logging
import ssl
import threading
import time
from typing import Callable, MutableMapping, Optional

import certifi
import httpx

from .settings import HttpSettings, get_settings

LOGGER = logging.getLogger("RustReleases.net")

# --- Constants & globals -------------------------------------------------------

_CLIENT_LOCK = threading.RLock()
_HTTP_CLIENT: Optional[httpx.Client] = None
_CLIENT_FACTORY: Optional[Callable[[], httpx.Client]] = None

# --- Client construction helpers ----------------------------------------------


def _build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.load_verify_locations(certifi.where())
    return context


def _request_hook(request: httpx.Request) -> None:
    meta: MutableMapping[str, object] = request.extensions.setdefault("releases_meta", {})  # type: ignore[assignment]
    meta["start_time"] = time.perf_counter()


def _response_hook(response: httpx.Response) -> None:
    # Hooks see every hop of a redirect chain; the client follows 3xx itself.
    if not response.is_redirect:
        response.raise_for_status()

    meta = response.request.extensions.get("releases_meta", {})
    elapsed: Optional[float] = None
    start = meta.get("start_time") if isinstance(meta, MutableMapping) else None
    if isinstance(start, (int, float)):
        elapsed = time.perf_counter() - start

    LOGGER.debug(
        "http-response",
        extra={
            "stage": "download",
            "url": str(response.request.url),
            "status": response.status_code,
            "elapsed_sec": elapsed,
        },
    )


def _timeout_for(http: HttpSettings) -> httpx.Timeout:
    return httpx.Timeout(
        connect=http.timeout_connect,
        read=http.timeout_read,
        write=http.timeout_read,
        pool=http.timeout_connect,
    )


def _build_http_client(http: HttpSettings) -> httpx.Client:
    return httpx.Client(
        http2=http.http2,
        headers={"User-Agent": http.user_agent},
        timeout=_timeout_for(http),
        verify=_build_ssl_context(),
        trust_env=http.trust_env,
        follow_redirects=True,
        event_hooks={"request": [_request_hook], "response": [_response_hook]},
    )


def _close_client_unlocked() -> None:
    global _HTTP_CLIENT
    if _HTTP_CLIENT is not None:
        with contextlib.suppress(Exception):
            _HTTP_CLIENT.close()
    _HTTP_CLIENT = None


# --- Public API ----------------------------------------------------------------


def configure_http_client(
    client: Optional[httpx.Client] = None,
    *,
    factory: Optional[Callable[[], httpx.Client]] = None,
) -> None:
    """Override the shared HTTPX client or register a factory for tests."""

    if client is not None and factory is not None:
        raise ValueError("provide either a client or factory, not both")

    global _HTTP_CLIENT, _CLIENT_FACTORY
    with _CLIENT_LOCK:
        if client is None:
            _close_client_unlocked()
        else:
            if _HTTP_CLIENT is not client:
                _close_client_unlocked()
            _HTTP_CLIENT = client
        _CLIENT_FACTORY = factory


def reset_http_client() -> None:
    """Close the shared client and forget any registered factory."""

    global _CLIENT_FACTORY
    with _CLIENT_LOCK:
        _CLIENT_FACTORY = None
        _close_client_unlocked()


def get_http_client(http: Optional[HttpSettings] = None) -> httpx.Client:
    """Return the shared HTTPX client, creating it if necessary."""

    global _HTTP_CLIENT
    with _CLIENT_LOCK:
        if _HTTP_CLIENT is not None:
            return _HTTP_CLIENT

        if _CLIENT_FACTORY is not None:
            candidate = _CLIENT_FACTORY()
            if not isinstance(candidate, httpx.Client):
                raise TypeError("client factory must return an httpx.Client")
            _HTTP_CLIENT = candidate
            return candidate

        _HTTP_CLIENT = _build_http_client(http or get_settings().http)
        return _HTTP_CLIENT


def http_event_hooks() -> dict:
    """Return the request/response hooks installed on the default client.

    Custom clients (including test clients backed by ``httpx.MockTransport``)
    should install these so non-2xx responses raise like the default client.
    """

    return {"request": [_request_hook], "response": [_response_hook]}
