"""Shared fixtures for the rust_releases test suite.

Every test runs with the cache rooted under ``tmp_path`` and with no shared
HTTP client installed, so nothing touches the user cache or the network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from RustReleases import net
from RustReleases.settings import reset_settings
from RustReleases.testing import RecordingTransport, use_mock_http_client

FIXTURES = Path(__file__).parent / "fixtures"

META_MANIFEST_URL = "https://static.rust-lang.org/manifests.txt"
STABLE_1_49_URL = "https://static.rust-lang.org/dist/2020-12-31/channel-rust-stable.toml"
STABLE_1_50_URL = "https://static.rust-lang.org/dist/2021-02-11/channel-rust-stable.toml"
CHANGELOG_URL = "https://raw.githubusercontent.com/rust-lang/rust/master/RELEASES.md"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the cache at ``tmp_path`` and drop any cached settings/client."""

    for name in ("RUST_RELEASES_CACHE_DIR", "RUST_RELEASES_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    cache_base = tmp_path / "cache"
    monkeypatch.setenv("RUST_RELEASES_CACHE_DIR", str(cache_base))
    reset_settings()
    net.reset_http_client()
    yield cache_base
    reset_settings()
    net.reset_http_client()


@pytest.fixture
def cache_dir(isolated_settings: Path) -> Path:
    """Directory the fetcher writes index documents to."""

    return isolated_settings / "index"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def upstream() -> Iterator[RecordingTransport]:
    """Install a mock transport serving the fixture documents at their upstream URLs."""

    transport = RecordingTransport(
        {
            META_MANIFEST_URL: (FIXTURES / "manifests.txt").read_bytes(),
            STABLE_1_49_URL: (FIXTURES / "channel-rust-1.49.0.toml").read_bytes(),
            STABLE_1_50_URL: (FIXTURES / "channel-rust-1.50.0.toml").read_bytes(),
            CHANGELOG_URL: (FIXTURES / "RELEASES.md").read_bytes(),
        }
    )
    with use_mock_http_client(transport):
        yield transport
