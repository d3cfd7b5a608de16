"""Source built from the toolchain changelog (``RELEASES.md``)."""

from __future__ import annotations

import datetime as dt
import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import httpx

from ..channel import Channel
from ..document import Document, LocalPath
from ..download import download_if_not_stale
from ..errors import ReleasesError, RustChangelogError, translate_errors
from ..release import Release, ReleaseIndex
from ..settings import ReleasesSettings, cache_root, get_settings

__all__ = ["CHANGELOG_CACHE_KEY", "RustChangelog", "parse_changelog"]

LOGGER = logging.getLogger("RustReleases.sources.rust_changelog")

CHANGELOG_CACHE_KEY = "RELEASES.md"

# "Version 1.50.0 (2021-02-11)"
_VERSION_HEADER = re.compile(
    r"^Version\s+(?P<version>\d+\.\d+\.\d+\S*)(?:\s+\((?P<date>[^)]*)\))?"
)


def parse_changelog(content: bytes, *, today: Optional[dt.date] = None) -> List[Release]:
    """Extract the released versions from a changelog.

    Only ``Version X.Y.Z (YYYY-MM-DD)`` header lines are considered. Headers
    dated after ``today`` describe unreleased versions and are skipped; a
    header without a parseable date is kept.

    Raises:
        RustChangelogError: When the content is not UTF-8, or a header holds a
            version that is not a semantic version.
    """

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RustChangelogError(f"Unable to decode changelog as UTF-8: {exc}") from exc

    cutoff = today or dt.date.today()
    releases: List[Release] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        match = _VERSION_HEADER.match(line)
        if match is None:
            continue
        released_on = _parse_date(match.group("date"))
        if released_on is not None and released_on > cutoff:
            continue
        version = match.group("version")
        try:
            releases.append(Release.parse(version))
        except ValueError as exc:
            raise RustChangelogError(
                f"Unable to parse version {version!r} on line {lineno}"
            ) from exc
    return releases


def _parse_date(value: Optional[str]) -> Optional[dt.date]:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError:
        return None


class RustChangelog:
    """Release index source parsing the changelog.

    The changelog only records stable releases, so :meth:`fetch_channel`
    supports :attr:`Channel.STABLE` alone.
    """

    def __init__(self, document: Document, *, today: Optional[dt.date] = None) -> None:
        self._document = document
        self._today = today

    @classmethod
    def from_path(cls, path: Union[str, Path], *, today: Optional[dt.date] = None) -> "RustChangelog":
        return cls(LocalPath(Path(path)), today=today)

    @classmethod
    def from_document(cls, document: Document, *, today: Optional[dt.date] = None) -> "RustChangelog":
        return cls(document, today=today)

    @property
    def document(self) -> Document:
        return self._document

    def build_index(self) -> ReleaseIndex:
        with translate_errors():
            releases = parse_changelog(self._document.load(), today=self._today)
        return ReleaseIndex.from_releases(releases)

    @classmethod
    def fetch_channel(
        cls,
        channel: Channel,
        settings: Optional[ReleasesSettings] = None,
        *,
        client: Optional[httpx.Client] = None,
    ) -> "RustChangelog":
        """Fetch the changelog, reusing a cached copy younger than a day.

        Raises:
            ReleasesError: ``CHANNEL_NOT_FOUND`` for any channel but stable,
                or the fetch failure.
        """

        if channel is not Channel.STABLE:
            raise ReleasesError.no_such_channel(channel.value)
        cfg = settings or get_settings()
        document = download_if_not_stale(
            cfg.urls.changelog,
            cache_root(cfg),
            CHANGELOG_CACHE_KEY,
            cfg.cache.changelog_staleness_sec,
            client=client,
        )
        return cls(document)
