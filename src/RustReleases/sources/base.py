"""Capabilities shared by every ingestion source.

Two independent protocols describe a source:

* :class:`Source` turns documents the source already holds into a
  :class:`~RustReleases.release.ReleaseIndex`, without network access.
* :class:`FetchResources` obtains those documents from upstream for a
  release channel and returns a ready-to-build source.

Every source implements ``Source``; only some implement ``FetchResources``.
"""

from __future__ import annotations

from typing import Optional, Protocol, Type, TypeVar, runtime_checkable

import httpx

from ..channel import Channel
from ..release import ReleaseIndex
from ..settings import ReleasesSettings

__all__ = ["Source", "FetchResources"]

S = TypeVar("S", bound="FetchResources")


@runtime_checkable
class Source(Protocol):
    """Protocol describing index construction from held documents."""

    def build_index(self) -> ReleaseIndex:
        """Parse the held documents into a release index.

        Raises:
            ReleasesError: When a document cannot be loaded or parsed.
        """
        ...


@runtime_checkable
class FetchResources(Protocol):
    """Protocol describing how a source obtains its input documents."""

    @classmethod
    def fetch_channel(
        cls: Type[S],
        channel: Channel,
        settings: Optional[ReleasesSettings] = None,
        *,
        client: Optional[httpx.Client] = None,
    ) -> S:
        """Fetch (or reuse cached) documents for ``channel`` and wrap them in a source.

        Raises:
            ReleasesError: When any required document cannot be fetched, or
                ``channel`` is not available from this source.
        """
        ...
