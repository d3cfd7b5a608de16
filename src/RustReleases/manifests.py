# === NAVMAP v1 ===
# {
#   "module": "RustReleases.manifests",
#   "purpose": "Parse the meta manifest and release manifests, and resolve which manifests to fetch",
#   "sections": [
#     {"id": "models", "name": "Manifest Sources", "anchor": "MOD", "kind": "api"},
#     {"id": "parsers", "name": "Parsers", "anchor": "PRS", "kind": "api"},
#     {"id": "resolution", "name": "Source Resolution", "anchor": "RES", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Channel manifest resolution.

Upstream publishes a singleton *meta manifest* (``manifests.txt``) listing one
line per dated, per-channel release manifest::

    static.rust-lang.org/dist/2021-02-11/channel-rust-stable.toml

Each release manifest is a TOML document whose ``pkg.rust.version`` starts
with the semantic version of the toolchain it describes. Resolution fetches
the meta manifest with a short staleness timeout, keeps the entries for the
requested channel in document order, and fetches every matching release
manifest with a long timeout (a published manifest never changes).
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - exercised on older interpreters
    import tomli as tomllib  # type: ignore[no-redef]

from .channel import Channel
from .document import Document
from .download import download_if_not_stale
from .errors import ChannelManifestsError, ReleasesError, translate_errors
from .release import Release
from .settings import ReleasesSettings, cache_root, get_settings

__all__ = [
    "META_MANIFEST_CACHE_KEY",
    "ManifestSource",
    "MetaManifest",
    "parse_release_manifest",
    "manifest_file_name",
    "fetch_meta_manifest",
    "resolve_release_sources",
    "fetch_release_manifests",
]

LOGGER = logging.getLogger("RustReleases.manifests")

META_MANIFEST_CACHE_KEY = "manifests.txt"

_MANIFEST_LINE = re.compile(
    r"^(?:(?P<scheme>https?)://)?"
    r"(?P<location>[^\s]+/)"
    r"(?P<date>\d{4}-\d{2}-\d{2})/"
    r"channel-rust-(?P<channel>[A-Za-z]+)\.toml$"
)


# --- Manifest Sources ---------------------------------------------------------


@dataclass(frozen=True)
class ManifestSource:
    """One dated release manifest listed in the meta manifest."""

    channel: Channel
    date: dt.date
    url: str


def manifest_file_name(source: ManifestSource) -> str:
    """Return the cache key for ``source``, e.g. ``stable_2021-02-11.toml``."""

    return f"{source.channel.value}_{source.date.isoformat()}.toml"


class MetaManifest:
    """Parsed meta manifest: the ordered list of :class:`ManifestSource` entries."""

    def __init__(self, manifests: Sequence[ManifestSource]) -> None:
        self._manifests = tuple(manifests)

    @property
    def manifests(self) -> Sequence[ManifestSource]:
        return self._manifests

    def for_channel(self, channel: Channel) -> List[ManifestSource]:
        """Return the entries tagged ``channel``, preserving document order."""

        return [source for source in self._manifests if source.channel is channel]

    @classmethod
    def parse(cls, content: bytes) -> "MetaManifest":
        """Parse the raw meta manifest.

        Raises:
            ChannelManifestsError: When the content is not UTF-8, or a
                non-blank line does not describe a dated channel manifest.
        """

        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ChannelManifestsError("Unable to parse the meta manifest") from exc

        sources: List[ManifestSource] = []
        for lineno, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            sources.append(_parse_manifest_source(line, lineno))
        return cls(sources)


def _parse_manifest_source(line: str, lineno: int) -> ManifestSource:
    match = _MANIFEST_LINE.match(line)
    if match is None:
        raise ChannelManifestsError(
            f"Unable to parse a manifest source in the meta manifest (line {lineno}: {line!r})"
        )
    try:
        date = dt.date.fromisoformat(match.group("date"))
    except ValueError as exc:
        raise ChannelManifestsError(
            f"Unable to parse manifest date (line {lineno}: {match.group('date')!r})"
        ) from exc
    try:
        channel = Channel(match.group("channel").lower())
    except ValueError as exc:
        raise ChannelManifestsError(
            f"Unknown release channel in the meta manifest (line {lineno}: "
            f"{match.group('channel')!r})"
        ) from exc
    url = line if match.group("scheme") else f"https://{line}"
    return ManifestSource(channel=channel, date=date, url=url)


# --- Parsers ------------------------------------------------------------------


def parse_release_manifest(content: bytes) -> Release:
    """Extract the toolchain release described by a release manifest.

    Raises:
        ChannelManifestsError: When the TOML is malformed, lacks
            ``pkg.rust.version``, or the version is not a semantic version.
    """

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ChannelManifestsError("Unable to decode release manifest as UTF-8") from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ChannelManifestsError(f"Unable to deserialize release manifest: {exc}") from exc

    package = data.get("pkg", {})
    rust = package.get("rust", {}) if isinstance(package, dict) else {}
    version = rust.get("version") if isinstance(rust, dict) else None
    if not isinstance(version, str) or not version.split():
        raise ChannelManifestsError("Unable to find Rust version in release manifest")

    # "1.50.0 (cb75ad5db 2021-02-10)"
    token = version.split()[0]
    try:
        return Release.parse(token)
    except ValueError as exc:
        raise ChannelManifestsError(f"Unable to parse Rust version {token!r}") from exc


# --- Source Resolution --------------------------------------------------------


def fetch_meta_manifest(
    settings: Optional[ReleasesSettings] = None,
    *,
    cache_dir: Optional[Path] = None,
    client: Optional[httpx.Client] = None,
) -> Document:
    """Fetch the meta manifest unless a copy younger than one day is cached."""

    cfg = settings or get_settings()
    return download_if_not_stale(
        cfg.urls.meta_manifest,
        cache_dir or cache_root(cfg),
        META_MANIFEST_CACHE_KEY,
        cfg.cache.meta_manifest_staleness_sec,
        client=client,
    )


def resolve_release_sources(
    channel: Channel,
    settings: Optional[ReleasesSettings] = None,
    *,
    cache_dir: Optional[Path] = None,
    client: Optional[httpx.Client] = None,
) -> List[ManifestSource]:
    """Return the manifest sources for ``channel`` listed by the meta manifest.

    Raises:
        ReleasesError: When the meta manifest cannot be fetched or parsed.
    """

    document = fetch_meta_manifest(settings, cache_dir=cache_dir, client=client)
    with translate_errors():
        meta_manifest = MetaManifest.parse(document.load())
    sources = meta_manifest.for_channel(channel)
    LOGGER.info(
        "resolved release manifests",
        extra={
            "stage": "resolve",
            "channel": channel.value,
            "matched": len(sources),
            "listed": len(meta_manifest.manifests),
        },
    )
    return sources


def fetch_release_manifests(
    sources: Sequence[ManifestSource],
    settings: Optional[ReleasesSettings] = None,
    *,
    cache_dir: Optional[Path] = None,
    client: Optional[httpx.Client] = None,
) -> List[Document]:
    """Fetch every release manifest in ``sources``, sequentially.

    A failure for any one source aborts the whole call; no partial result is
    returned.

    Raises:
        ReleasesError: From the first failing fetch.
    """

    cfg = settings or get_settings()
    directory = cache_dir or cache_root(cfg)
    documents: List[Document] = []
    for source in sources:
        try:
            documents.append(
                download_if_not_stale(
                    source.url,
                    directory,
                    manifest_file_name(source),
                    cfg.cache.release_manifest_staleness_sec,
                    client=client,
                )
            )
        except ReleasesError:
            LOGGER.error(
                "release manifest fetch failed",
                extra={"stage": "download", "url": source.url, "channel": source.channel.value},
            )
            raise
    return documents
