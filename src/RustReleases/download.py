# === NAVMAP v1 ===
# {
#   "module": "RustReleases.download",
#   "purpose": "Staleness-aware cache fetcher for upstream index documents",
#   "sections": [
#     {"id": "staleness", "name": "Staleness", "anchor": "STL", "kind": "helpers"},
#     {"id": "fetch", "name": "Download", "anchor": "DL", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Fetch a document over HTTP unless a fresh copy is already cached on disk.

The modification time of the cache file is the only staleness signal: no
ETags, checksums or validators are consulted. A download is written to a
``<key>.part`` sibling and renamed over the cache entry, so a failed write
never leaves a truncated entry with a fresh modification time. Failures are
never papered over with a stale copy; they propagate to the caller as
:class:`~RustReleases.errors.ReleasesError`.

No locking is performed around the cache directory. Two processes racing on
the same key share one ``.part`` file and may interleave their writes.
"""

from __future__ import annotations

import contextlib
import logging
import time
from pathlib import Path
from typing import Optional, Union

import httpx

from .document import Document, LocalPath, RemoteCached
from .errors import ReleasesError, translate_errors
from .net import get_http_client
from .settings import get_settings

__all__ = ["download_if_not_stale", "is_stale"]

LOGGER = logging.getLogger("RustReleases.download")

PathLike = Union[str, Path]


def is_stale(path: PathLike, timeout: float, *, now: Optional[float] = None) -> bool:
    """Return ``True`` when ``path`` is at least ``timeout`` seconds old.

    An entry whose age equals ``timeout`` exactly is stale.

    Args:
        path: Existing cache file.
        timeout: Maximum age in seconds.
        now: Current POSIX timestamp; defaults to :func:`time.time`.

    Raises:
        ReleasesError: ``IO`` when the file cannot be stat-ed, ``SYSTEM_TIME``
            when its modification time lies in the future.
    """

    with translate_errors():
        modified = Path(path).stat().st_mtime
    current = time.time() if now is None else now
    elapsed = current - modified
    if elapsed < 0:
        raise ReleasesError.system_time(
            f"Modification time of {path} is {-elapsed:.0f}s in the future"
        )
    return elapsed >= timeout


def download_if_not_stale(
    url: str,
    cache_dir: PathLike,
    cache_key: str,
    timeout: float,
    *,
    client: Optional[httpx.Client] = None,
    now: Optional[float] = None,
) -> Document:
    """Return the document for ``url``, downloading it only when the cache is stale.

    Args:
        url: Remote location of the document.
        cache_dir: Directory holding cache entries; created on first download.
        cache_key: File name of the cache entry within ``cache_dir``.
        timeout: Staleness timeout in seconds.
        client: HTTPX client to use instead of the shared one.
        now: Current POSIX timestamp, for deterministic staleness checks.

    Returns:
        :class:`LocalPath` when a fresh cache entry exists, otherwise
        :class:`RemoteCached` holding the downloaded bytes.

    Raises:
        ReleasesError: ``IO`` for filesystem failures, ``NETWORK`` for
            transport failures and non-2xx responses, ``SYSTEM_TIME`` when the
            cache entry is dated in the future.
    """

    cache_dir = Path(cache_dir)
    path = cache_dir / cache_key

    if path.exists() and not is_stale(path, timeout, now=now):
        LOGGER.debug(
            "using cached document",
            extra={"stage": "cache", "url": url, "path": str(path)},
        )
        return LocalPath(path)

    LOGGER.info(
        "downloading document",
        extra={"stage": "download", "url": url, "path": str(path)},
    )
    with translate_errors():
        cache_dir.mkdir(parents=True, exist_ok=True)
        http = client or get_http_client()
        response = http.get(url, headers={"User-Agent": get_settings().http.user_agent})
        response.raise_for_status()
        content = response.content
        # Only a completely written entry may carry a fresh mtime at ``path``.
        part = path.with_name(path.name + ".part")
        try:
            part.write_bytes(content)
            part.replace(path)
        except OSError:
            with contextlib.suppress(OSError):
                part.unlink()
            raise

    return RemoteCached(path, content)
