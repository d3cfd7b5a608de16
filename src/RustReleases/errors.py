# === NAVMAP v1 ===
# {
#   "module": "RustReleases.errors",
#   "purpose": "Define the single reportable error type and the per-source parse errors it wraps",
#   "sections": [
#     {"id": "kinds", "name": "Error Kinds", "anchor": "KND", "kind": "api"},
#     {"id": "parse", "name": "Source Parse Errors", "anchor": "PRS", "kind": "api"},
#     {"id": "releases-error", "name": "ReleasesError", "anchor": "REL", "kind": "api"},
#     {"id": "translate", "name": "Error Translation", "anchor": "TRN", "kind": "helpers"}
#   ]
# }
# === /NAVMAP ===

"""Error taxonomy shared by every layer of the release ingestion pipeline.

Fetching and parsing touch the filesystem, the network, the system clock and
several upstream document grammars. Rather than letting each of those leak its
own exception type, every public operation reports a single
:class:`ReleasesError` tagged with an :class:`ErrorKind`. The lower-layer
exception is chained as ``__cause__`` so callers can still inspect it, while
``str(error)`` remains suitable for direct display.
"""

from __future__ import annotations

import contextlib
import enum
from typing import Iterator, Optional

import httpx

__all__ = [
    "ErrorKind",
    "ParseError",
    "ChannelManifestsError",
    "DistIndexError",
    "RustChangelogError",
    "ReleasesError",
    "ConfigurationError",
    "translate_errors",
]


class ErrorKind(str, enum.Enum):
    """Category of a :class:`ReleasesError`."""

    IO = "io"
    NETWORK = "network"
    SYSTEM_TIME = "system_time"
    CACHE_UNAVAILABLE = "cache_unavailable"
    PARSE = "parse"
    CHANNEL_NOT_FOUND = "channel_not_found"


class ParseError(ValueError):
    """Raised by a document parser when its input does not match the grammar."""


class ChannelManifestsError(ParseError):
    """Raised when the meta manifest or a release manifest cannot be parsed."""


class DistIndexError(ParseError):
    """Raised when a dist listing cannot be decoded."""


class RustChangelogError(ParseError):
    """Raised when the changelog cannot be decoded or holds a malformed version."""


class ReleasesError(RuntimeError):
    """Top level failure for building or fetching a release index."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.cause = cause
        self.status_code = status_code
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def from_io(cls, exc: OSError) -> "ReleasesError":
        """Wrap a filesystem failure."""

        return cls(ErrorKind.IO, str(exc) or exc.__class__.__name__, cause=exc)

    @classmethod
    def from_network(cls, exc: httpx.HTTPError) -> "ReleasesError":
        """Wrap a transport or HTTP status failure, recording the status when known."""

        status_code: Optional[int] = None
        if isinstance(exc, httpx.HTTPStatusError):
            status_code = exc.response.status_code
        return cls(
            ErrorKind.NETWORK,
            str(exc) or exc.__class__.__name__,
            cause=exc,
            status_code=status_code,
        )

    @classmethod
    def from_parse(cls, exc: ParseError) -> "ReleasesError":
        """Wrap a per-source parse failure."""

        return cls(ErrorKind.PARSE, str(exc), cause=exc)

    @classmethod
    def system_time(cls, message: str) -> "ReleasesError":
        """Report a clock anomaly that makes elapsed-time computation impossible."""

        return cls(ErrorKind.SYSTEM_TIME, message)

    @classmethod
    def cache_unavailable(cls, cause: Optional[BaseException] = None) -> "ReleasesError":
        """Report that the platform cache directory cannot be resolved."""

        return cls(
            ErrorKind.CACHE_UNAVAILABLE,
            "Unable to create or access the rust-releases cache",
            cause=cause,
        )

    @classmethod
    def no_such_channel(cls, channel: str) -> "ReleasesError":
        """Report a release channel that is unknown or unsupported by a source."""

        return cls(ErrorKind.CHANNEL_NOT_FOUND, f"Release channel '{channel}' was not found")


class ConfigurationError(RuntimeError):
    """Raised when a settings file or environment override is invalid."""


@contextlib.contextmanager
def translate_errors() -> Iterator[None]:
    """Convert lower-layer exceptions raised inside the block into :class:`ReleasesError`.

    ``ReleasesError`` instances pass through untouched so nested calls do not
    double-wrap.
    """

    try:
        yield
    except ReleasesError:
        raise
    except ParseError as exc:
        raise ReleasesError.from_parse(exc) from exc
    except httpx.HTTPError as exc:
        raise ReleasesError.from_network(exc) from exc
    except OSError as exc:
        raise ReleasesError.from_io(exc) from exc
