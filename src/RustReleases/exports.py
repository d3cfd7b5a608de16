"""Export manifest and public API surface.

Maps each public name re-exported by :mod:`RustReleases` to the submodule
defining it, so the package can import submodules lazily on first access.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

__all__ = [
    "ExportSpec",
    "EXPORT_MAP",
    "EXPORTS",
    "PUBLIC_API_MANIFEST",
]


@dataclass(frozen=True)
class ExportSpec:
    """Specification for an exported symbol."""

    name: str
    """Name of the symbol."""

    module: str
    """Fully qualified module where the symbol is defined."""

    include_in_manifest: bool = True
    """Whether to include this symbol in the public API manifest."""

    doc: str = ""
    """Short documentation string."""

    @property
    def attribute(self) -> str:
        return self.name


_PKG = "RustReleases"

EXPORTS: List[ExportSpec] = [
    ExportSpec("Channel", f"{_PKG}.channel", doc="Release channel enumeration"),
    ExportSpec("Release", f"{_PKG}.release", doc="Single released version"),
    ExportSpec("ReleaseIndex", f"{_PKG}.release", doc="Sorted, deduplicated release index"),
    ExportSpec("Document", f"{_PKG}.document", doc="Document provenance union"),
    ExportSpec("LocalPath", f"{_PKG}.document", doc="Document read from disk"),
    ExportSpec("RemoteCached", f"{_PKG}.document", doc="Document just downloaded"),
    ExportSpec("ErrorKind", f"{_PKG}.errors", doc="Error category"),
    ExportSpec("ReleasesError", f"{_PKG}.errors", doc="Top level error"),
    ExportSpec("Source", f"{_PKG}.sources", doc="Index construction capability"),
    ExportSpec("FetchResources", f"{_PKG}.sources", doc="Document fetching capability"),
    ExportSpec("ChannelManifests", f"{_PKG}.sources", doc="Manifest based source"),
    ExportSpec("RustChangelog", f"{_PKG}.sources", doc="Changelog based source"),
    ExportSpec("RustDistWithCLI", f"{_PKG}.sources", doc="Dist listing based source"),
    ExportSpec("build_index", f"{_PKG}.sources", doc="Build an index from a source"),
    ExportSpec("fetch_index", f"{_PKG}.sources", doc="Fetch documents and build an index"),
    ExportSpec("download_if_not_stale", f"{_PKG}.download", doc="Staleness-aware fetch"),
    ExportSpec("ReleasesSettings", f"{_PKG}.settings", doc="Settings model"),
    ExportSpec("get_settings", f"{_PKG}.settings", doc="Process-wide settings"),
]

EXPORT_MAP: Dict[str, ExportSpec] = {spec.name: spec for spec in EXPORTS}

PUBLIC_API_MANIFEST: Dict[str, Any] = {
    "modules": sorted({spec.module for spec in EXPORTS}),
    "symbols": [spec.name for spec in EXPORTS if spec.include_in_manifest],
}
