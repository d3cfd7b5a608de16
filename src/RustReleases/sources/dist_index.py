"""Source built from a flat listing of the distribution bucket."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Union

from ..document import Document, LocalPath
from ..errors import DistIndexError, translate_errors
from ..release import Release, ReleaseIndex

__all__ = ["RustDistWithCLI", "parse_dist_index"]

LOGGER = logging.getLogger("RustReleases.sources.dist_index")

_DIST_FILE = re.compile(r"^rust-\d")


def parse_dist_index(content: bytes) -> List[Release]:
    """Extract release versions from an ``aws s3 ls`` style listing.

    Sub-directory entries (``PRE 2021-03-25/``) never contribute a version.
    File entries are ``<date> <time> <size> <key>``; when ``key`` looks like
    ``rust-1.50.0-x86_64-unknown-linux-gnu.tar.gz`` the second ``-``
    separated field is parsed as a version. Lines that do not yield a
    semantic version are skipped.

    Raises:
        DistIndexError: When ``content`` is not UTF-8 text.
    """

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DistIndexError(f"Unable to decode dist index as UTF-8: {exc}") from exc

    releases: List[Release] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("PRE"):
            continue
        name = stripped.split()[-1]
        if not _DIST_FILE.match(name):
            continue
        try:
            releases.append(Release.parse(name.split("-")[1]))
        except ValueError:
            continue
    return releases


class RustDistWithCLI:
    """Release index source reading a pre-obtained dist bucket listing.

    The listing must be produced out of band, e.g.::

        aws --no-sign-request s3 ls static-rust-lang-org/dist/ > dist.txt

    This source does not implement ``fetch_channel``.
    """

    def __init__(self, document: Document) -> None:
        self._document = document

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "RustDistWithCLI":
        return cls(LocalPath(Path(path)))

    @classmethod
    def from_document(cls, document: Document) -> "RustDistWithCLI":
        return cls(document)

    @property
    def document(self) -> Document:
        return self._document

    def build_index(self) -> ReleaseIndex:
        with translate_errors():
            releases = parse_dist_index(self._document.load())
        LOGGER.debug("parsed dist index", extra={"stage": "parse", "candidates": len(releases)})
        return ReleaseIndex.from_releases(releases)
