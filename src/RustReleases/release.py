# === NAVMAP v1 ===
# {
#   "module": "RustReleases.release",
#   "purpose": "Release value type and the canonical sorted, deduplicated release index",
#   "sections": [
#     {"id": "release", "name": "Release", "anchor": "class-release", "kind": "class"},
#     {"id": "release-index", "name": "ReleaseIndex", "anchor": "class-release-index", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Release records and the index every ingestion source funnels into.

:class:`ReleaseIndex` is the single normalisation point of the pipeline: no
matter which upstream document produced the input, the index holds its
releases deduplicated by version and sorted ascending by semantic-version
precedence. Once built it is read-only.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Tuple, Union, overload

import semver

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for type checkers only
    from .sources.base import Source

__all__ = ["Release", "ReleaseIndex"]

VersionLike = Union["Release", semver.Version, str]


@dataclass(frozen=True, order=True)
class Release:
    """A single published toolchain build, identified by its semantic version."""

    version: semver.Version

    @classmethod
    def parse(cls, text: str) -> "Release":
        """Parse ``text`` as a semantic version.

        Raises:
            ValueError: When ``text`` is not a valid semantic version.
        """

        return cls(semver.Version.parse(text.strip()))

    def __str__(self) -> str:
        return str(self.version)


def _coerce_version(value: VersionLike) -> semver.Version:
    if isinstance(value, Release):
        return value.version
    if isinstance(value, semver.Version):
        return value
    return semver.Version.parse(value.strip())


class ReleaseIndex:
    """Immutable, ascending, deduplicated collection of :class:`Release` values."""

    __slots__ = ("_releases",)

    def __init__(self, releases: Iterable[Release] = ()) -> None:
        self._releases: Tuple[Release, ...] = tuple(sorted(set(releases)))

    @classmethod
    def from_releases(cls, releases: Iterable[Release]) -> "ReleaseIndex":
        """Build an index from a fully materialised collection of releases."""

        return cls(releases)

    @classmethod
    def from_source(cls, source: "Source") -> "ReleaseIndex":
        """Build an index by delegating to ``source.build_index``."""

        return source.build_index()

    @property
    def releases(self) -> Tuple[Release, ...]:
        """All releases, lowest version first."""

        return self._releases

    def most_recent(self) -> Optional[Release]:
        """Return the highest version, or ``None`` for an empty index."""

        return self._releases[-1] if self._releases else None

    def least_recent(self) -> Optional[Release]:
        """Return the lowest version, or ``None`` for an empty index."""

        return self._releases[0] if self._releases else None

    def contains_version(self, version: VersionLike) -> bool:
        """Return ``True`` when ``version`` is part of the index.

        Strings that are not valid semantic versions are never contained.
        """

        try:
            target = Release(_coerce_version(version))
        except ValueError:
            return False
        low = bisect.bisect_left(self._releases, target)
        return low < len(self._releases) and self._releases[low] == target

    def __contains__(self, item: object) -> bool:
        if isinstance(item, (Release, semver.Version, str)):
            return self.contains_version(item)
        return False

    def __len__(self) -> int:
        return len(self._releases)

    @overload
    def __getitem__(self, index: int) -> Release: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[Release, ...]: ...

    def __getitem__(self, index):
        return self._releases[index]

    def __iter__(self) -> Iterator[Release]:
        return iter(self._releases)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReleaseIndex):
            return NotImplemented
        return self._releases == other._releases

    def __hash__(self) -> int:
        return hash(self._releases)

    def __repr__(self) -> str:
        latest = self.most_recent()
        return f"ReleaseIndex(len={len(self)}, most_recent={str(latest) if latest else None})"
