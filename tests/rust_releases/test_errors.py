"""Translation of lower-layer failures into ``ReleasesError``."""

from __future__ import annotations

import httpx
import pytest

from RustReleases.channel import Channel
from RustReleases.errors import (
    ChannelManifestsError,
    ErrorKind,
    ReleasesError,
    translate_errors,
)


def _raise_inside(exc: BaseException) -> ReleasesError:
    with pytest.raises(ReleasesError) as excinfo:
        with translate_errors():
            raise exc
    return excinfo.value


def test_parse_errors_become_parse_kind():
    cause = ChannelManifestsError("bad line")

    error = _raise_inside(cause)

    assert error.kind is ErrorKind.PARSE
    assert error.__cause__ is cause
    assert str(error) == "bad line"


def test_os_errors_become_io_kind():
    error = _raise_inside(PermissionError(13, "Permission denied"))

    assert error.kind is ErrorKind.IO
    assert isinstance(error.cause, PermissionError)


def test_http_status_errors_keep_status_code():
    request = httpx.Request("GET", "https://static.rust-lang.org/manifests.txt")
    response = httpx.Response(502, request=request)
    cause = httpx.HTTPStatusError("bad gateway", request=request, response=response)

    error = _raise_inside(cause)

    assert error.kind is ErrorKind.NETWORK
    assert error.status_code == 502


def test_transport_errors_have_no_status_code():
    error = _raise_inside(httpx.ReadTimeout("timed out"))

    assert error.kind is ErrorKind.NETWORK
    assert error.status_code is None


def test_releases_errors_pass_through_untouched():
    original = ReleasesError.system_time("clock went backwards")

    assert _raise_inside(original) is original


def test_unrelated_exceptions_propagate():
    with pytest.raises(KeyError):
        with translate_errors():
            raise KeyError("x")


def test_channel_parse():
    assert Channel.parse("Stable") is Channel.STABLE
    assert Channel.parse(" nightly ") is Channel.NIGHTLY
    assert str(Channel.BETA) == "beta"

    with pytest.raises(ReleasesError) as excinfo:
        Channel.parse("weekly")

    assert excinfo.value.kind is ErrorKind.CHANNEL_NOT_FOUND
    assert str(excinfo.value) == "Release channel 'weekly' was not found"


def test_cache_unavailable_message():
    error = ReleasesError.cache_unavailable()

    assert error.kind is ErrorKind.CACHE_UNAVAILABLE
    assert "cache" in str(error)
