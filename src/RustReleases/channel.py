"""Release channels a toolchain build can be published on."""

from __future__ import annotations

import enum

from .errors import ReleasesError

__all__ = ["Channel"]


class Channel(str, enum.Enum):
    """Named release track.

    The value is the lowercase name used in upstream file names, e.g. the
    ``stable`` in ``channel-rust-stable.toml``.
    """

    STABLE = "stable"
    BETA = "beta"
    NIGHTLY = "nightly"

    @classmethod
    def parse(cls, name: str) -> "Channel":
        """Return the channel called ``name`` (case-insensitive).

        Raises:
            ReleasesError: With kind ``CHANNEL_NOT_FOUND`` for unknown names.
        """

        normalized = name.strip().lower()
        for channel in cls:
            if channel.value == normalized:
                return channel
        raise ReleasesError.no_such_channel(name)

    def __str__(self) -> str:
        return self.value
