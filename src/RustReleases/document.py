"""Provenance of an input document: read lazily from disk or just downloaded.

A :data:`Document` is either a :class:`LocalPath`, whose bytes are read from
disk on every :meth:`~LocalPath.load`, or a :class:`RemoteCached`, whose bytes
were just downloaded, are held in memory, and have also been written to
``path`` as the cache entry. Both variants expose the same ``load`` so sources
never need to know where their input came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .errors import ReleasesError

__all__ = ["Document", "LocalPath", "RemoteCached"]


@dataclass(frozen=True)
class LocalPath:
    """Document present on disk, e.g. pulled from the cache or supplied by the caller."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def load(self) -> bytes:
        """Read the whole file.

        Raises:
            ReleasesError: With kind ``IO`` when the file cannot be read.
        """

        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise ReleasesError.from_io(exc) from exc


@dataclass(frozen=True)
class RemoteCached:
    """Document just downloaded; ``content`` was also written to ``path``."""

    path: Path
    content: bytes = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def load(self) -> bytes:
        return bytes(self.content)


Document = Union[LocalPath, RemoteCached]
