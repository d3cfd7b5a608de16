"""Source built from per-release channel manifests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import httpx

from ..channel import Channel
from ..document import Document, LocalPath
from ..errors import ReleasesError, translate_errors
from ..manifests import fetch_release_manifests, parse_release_manifest, resolve_release_sources
from ..release import Release, ReleaseIndex
from ..settings import ReleasesSettings, cache_root, get_settings

__all__ = ["ChannelManifests"]

LOGGER = logging.getLogger("RustReleases.sources.channel_manifests")


class ChannelManifests:
    """Release index source backed by one release manifest per published build.

    Each held document must be a release manifest describing exactly one
    release. Documents are usually obtained with :meth:`fetch_channel`, but
    locally stored manifests can be supplied with :meth:`from_paths`.
    """

    def __init__(self, documents: Iterable[Document]) -> None:
        self._documents = tuple(documents)

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "ChannelManifests":
        return cls(documents)

    @classmethod
    def from_paths(cls, paths: Iterable[Union[str, Path]]) -> "ChannelManifests":
        """Create a source from release manifests stored on disk."""

        return cls(LocalPath(Path(path)) for path in paths)

    @property
    def documents(self) -> Sequence[Document]:
        return self._documents

    def build_index(self) -> ReleaseIndex:
        """Parse every held manifest; any failure aborts the build."""

        releases: List[Release] = []
        for document in self._documents:
            with translate_errors():
                releases.append(parse_release_manifest(document.load()))
        LOGGER.debug(
            "parsed release manifests",
            extra={"stage": "parse", "documents": len(self._documents)},
        )
        return ReleaseIndex.from_releases(releases)

    @classmethod
    def fetch_channel(
        cls,
        channel: Channel,
        settings: Optional[ReleasesSettings] = None,
        *,
        client: Optional[httpx.Client] = None,
    ) -> "ChannelManifests":
        """Resolve and fetch the release manifests published on ``channel``.

        Raises:
            ReleasesError: ``CHANNEL_NOT_FOUND`` when the meta manifest lists
                no manifest for ``channel``; otherwise the first fetch or parse
                failure.
        """

        cfg = settings or get_settings()
        directory = cache_root(cfg)
        sources = resolve_release_sources(channel, cfg, cache_dir=directory, client=client)
        if not sources:
            raise ReleasesError.no_such_channel(channel.value)
        documents = fetch_release_manifests(sources, cfg, cache_dir=directory, client=client)
        return cls(documents)
