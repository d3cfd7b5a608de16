"""Public API for building a canonical index of Rust toolchain releases.

The package consumes one of several upstream documents (per-release channel
manifests, the changelog, or a dist bucket listing), caches what it downloads,
and normalises the parsed versions into a sorted, deduplicated
:class:`~RustReleases.release.ReleaseIndex`::

    >>> from RustReleases import Channel, ChannelManifests, fetch_index
    >>> index = fetch_index(ChannelManifests, Channel.STABLE)  # doctest: +SKIP
    >>> index.most_recent()  # doctest: +SKIP
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

from .exports import EXPORT_MAP, EXPORTS, PUBLIC_API_MANIFEST  # noqa: E402

_PUBLIC_EXPORTS = tuple(spec.name for spec in EXPORTS if spec.include_in_manifest)

__all__ = [*_PUBLIC_EXPORTS, "PUBLIC_API_MANIFEST", "__version__"]

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .channel import Channel
    from .document import Document, LocalPath, RemoteCached
    from .download import download_if_not_stale
    from .errors import ErrorKind, ReleasesError
    from .release import Release, ReleaseIndex
    from .settings import ReleasesSettings, get_settings
    from .sources import (
        ChannelManifests,
        FetchResources,
        RustChangelog,
        RustDistWithCLI,
        Source,
        build_index,
        fetch_index,
    )


def __getattr__(name: str) -> Any:
    """Lazily import API exports so ``import RustReleases`` stays cheap."""

    spec = EXPORT_MAP.get(name)
    if spec is not None and spec.name in _PUBLIC_EXPORTS:
        module = import_module(spec.module)
        value = getattr(module, spec.attribute)
        globals()[name] = value
        return value
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    """Expose lazily-populated attributes in ``dir()`` results."""

    return sorted(set(globals()) | set(__all__))
