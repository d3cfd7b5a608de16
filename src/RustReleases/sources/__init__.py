"""Ingestion sources and the helpers that turn them into release indexes.

Available sources:

- :class:`ChannelManifests`: one release manifest per build; fetchable.
- :class:`RustChangelog`: the ``RELEASES.md`` changelog; fetchable (stable only).
- :class:`RustDistWithCLI`: a dist bucket listing obtained out of band; not fetchable.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

import httpx

from ..channel import Channel
from ..release import ReleaseIndex
from ..settings import ReleasesSettings
from .base import FetchResources, Source
from .channel_manifests import ChannelManifests
from .dist_index import RustDistWithCLI, parse_dist_index
from .rust_changelog import RustChangelog, parse_changelog

__all__ = [
    "Source",
    "FetchResources",
    "ChannelManifests",
    "RustChangelog",
    "RustDistWithCLI",
    "SOURCES",
    "parse_changelog",
    "parse_dist_index",
    "build_index",
    "fetch_index",
]

SOURCES: Dict[str, type] = {
    "manifests": ChannelManifests,
    "changelog": RustChangelog,
    "dist-index": RustDistWithCLI,
}


def build_index(source: Source) -> ReleaseIndex:
    """Build an index from a source holding its documents."""

    return ReleaseIndex.from_source(source)


def fetch_index(
    source_type: Type[FetchResources],
    channel: Channel,
    settings: Optional[ReleasesSettings] = None,
    *,
    client: Optional[httpx.Client] = None,
) -> ReleaseIndex:
    """Fetch the documents ``source_type`` needs for ``channel`` and build the index.

    Raises:
        TypeError: When ``source_type`` cannot fetch its own documents.
        ReleasesError: From fetching or parsing.
    """

    if not issubclass(source_type, FetchResources):
        raise TypeError(f"{source_type.__name__} does not support fetching resources")
    source = source_type.fetch_channel(channel, settings, client=client)
    return build_index(source)
