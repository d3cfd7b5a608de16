"""Lazy package exports and the shared HTTP client."""

from __future__ import annotations

import importlib

import httpx
import pytest

import RustReleases
from RustReleases import net
from RustReleases.exports import EXPORTS, PUBLIC_API_MANIFEST
from RustReleases.settings import HttpSettings


@pytest.mark.parametrize("spec", EXPORTS, ids=lambda spec: spec.name)
def test_every_export_resolves_to_its_module(spec):
    value = getattr(RustReleases, spec.name)

    assert value is getattr(importlib.import_module(spec.module), spec.attribute)
    assert spec.name in dir(RustReleases)


def test_manifest_lists_public_symbols():
    assert "ReleaseIndex" in PUBLIC_API_MANIFEST["symbols"]
    assert "RustReleases.sources" in PUBLIC_API_MANIFEST["modules"]


def test_unknown_attribute_raises():
    with pytest.raises(AttributeError):
        RustReleases.does_not_exist


def test_default_client_identifies_itself():
    client = net.get_http_client(HttpSettings(user_agent="probe/1.0"))

    assert client.headers["User-Agent"] == "probe/1.0"
    assert client.follow_redirects is True
    assert net.get_http_client() is client


def test_configured_factory_is_used_once():
    built = []

    def factory() -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
        built.append(client)
        return client

    net.configure_http_client(factory=factory)

    assert net.get_http_client() is net.get_http_client()
    assert len(built) == 1


def test_configure_rejects_client_and_factory():
    with pytest.raises(ValueError):
        net.configure_http_client(client=httpx.Client(), factory=httpx.Client)
