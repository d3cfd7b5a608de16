# === NAVMAP v1 ===
# {
#   "module": "RustReleases.settings",
#   "purpose": "Typed settings, YAML/env loading and cache-root resolution",
#   "sections": [
#     {"id": "constants", "name": "Constants", "anchor": "CONST", "kind": "constants"},
#     {"id": "models", "name": "Settings Models", "anchor": "MOD", "kind": "api"},
#     {"id": "loading", "name": "Settings Loading", "anchor": "LOAD", "kind": "api"},
#     {"id": "paths", "name": "Cache Paths", "anchor": "PATH", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Configuration for release index fetching.

Settings come from three layers, highest precedence first: values passed to
:func:`load_settings` from a YAML file, ``RUST_RELEASES_*`` environment
variables (nested fields use ``__``, e.g. ``RUST_RELEASES_HTTP__USER_AGENT``),
and the defaults declared on the models below. The process-wide instance is
cached by :func:`get_settings`; tests call :func:`reset_settings` after
changing the environment.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

import platformdirs
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__
from .errors import ConfigurationError, ReleasesError

__all__ = [
    "APP_NAME",
    "APP_AUTHOR",
    "DEFAULT_META_MANIFEST_URL",
    "DEFAULT_CHANGELOG_URL",
    "HttpSettings",
    "CacheSettings",
    "LoggingSettings",
    "UrlSettings",
    "ReleasesSettings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "cache_root",
]

# --- Constants ----------------------------------------------------------------

APP_NAME = "rust-releases"
APP_AUTHOR = "RustReleases"
DEFAULT_META_MANIFEST_URL = "https://static.rust-lang.org/manifests.txt"
DEFAULT_CHANGELOG_URL = "https://raw.githubusercontent.com/rust-lang/rust/master/RELEASES.md"

# 1 day: the meta manifest gains an entry with every nightly.
META_MANIFEST_STALENESS_SEC = 86_400.0
# 1 year: a dated release manifest never changes once published.
RELEASE_MANIFEST_STALENESS_SEC = 31_557_600.0
CHANGELOG_STALENESS_SEC = 86_400.0

_SETTINGS_LOCK = threading.Lock()
_SETTINGS: Optional["ReleasesSettings"] = None

# --- Settings Models ----------------------------------------------------------


class HttpSettings(BaseModel):
    """HTTP client settings for the shared HTTPX client."""

    model_config = ConfigDict(frozen=True)

    user_agent: str = Field(
        default=f"RustReleases/{__version__} (python-httpx)",
        description="User-Agent header sent with every request",
    )
    timeout_connect: float = Field(default=5.0, gt=0.0, le=60.0)
    timeout_read: float = Field(default=30.0, gt=0.0, le=300.0)
    http2: bool = Field(default=False, description="Enable HTTP/2 (requires the h2 package)")
    trust_env: bool = Field(
        default=True,
        description="Honor HTTP(S)_PROXY and NO_PROXY environment variables",
    )


class CacheSettings(BaseModel):
    """Staleness timeouts, in seconds, per cached resource class."""

    model_config = ConfigDict(frozen=True)

    meta_manifest_staleness_sec: float = Field(default=META_MANIFEST_STALENESS_SEC, ge=0.0)
    release_manifest_staleness_sec: float = Field(default=RELEASE_MANIFEST_STALENESS_SEC, ge=0.0)
    changelog_staleness_sec: float = Field(default=CHANGELOG_STALENESS_SEC, ge=0.0)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    emit_json_logs: bool = Field(default=False, description="Also write JSON lines to the log dir")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize and validate logging level."""
        upper = str(v).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if upper not in valid_levels:
            raise ValueError(f"level must be one of {sorted(valid_levels)}, got '{v}'")
        return upper

    def level_int(self) -> int:
        """Convert level string to logging module integer."""
        return getattr(logging, self.level)


class UrlSettings(BaseModel):
    """Upstream document locations."""

    model_config = ConfigDict(frozen=True)

    meta_manifest: str = DEFAULT_META_MANIFEST_URL
    changelog: str = DEFAULT_CHANGELOG_URL


class ReleasesSettings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="RUST_RELEASES_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    cache_dir: Optional[Path] = Field(
        default=None,
        description="Cache root overriding the platform cache directory",
    )
    http: HttpSettings = Field(default_factory=HttpSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    urls: UrlSettings = Field(default_factory=UrlSettings)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def normalize_cache_dir(cls, v: Any) -> Optional[Path]:
        if v is None or v == "":
            return None
        return Path(v).expanduser()


# --- Settings Loading ---------------------------------------------------------


def load_settings(config_path: Optional[Path] = None) -> ReleasesSettings:
    """Build settings from an optional YAML file layered over the environment.

    Args:
        config_path: YAML file holding a mapping with the same shape as
            :class:`ReleasesSettings`.

    Returns:
        A validated settings instance; it is not installed as the process-wide
        default (see :func:`get_settings`).

    Raises:
        ConfigurationError: When the file is unreadable, is not a YAML mapping,
            or fails validation.
    """

    raw: Mapping[str, Any] = {}
    if config_path is not None:
        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Unable to read settings file {config_path}: {exc}") from exc
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, Mapping):
            raise ConfigurationError(f"Settings file {config_path} must contain a mapping")
        raw = loaded
    try:
        return ReleasesSettings(**raw)
    except PydanticValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def get_settings() -> ReleasesSettings:
    """Return the process-wide settings, loading them from the environment once."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        if _SETTINGS is None:
            _SETTINGS = load_settings()
        return _SETTINGS


def reset_settings(settings: Optional[ReleasesSettings] = None) -> None:
    """Install ``settings`` as the process-wide default, or clear the cached one."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        _SETTINGS = settings


# --- Cache Paths --------------------------------------------------------------


def cache_root(settings: Optional[ReleasesSettings] = None) -> Path:
    """Return the directory holding cached index documents.

    The layout is ``<cache root>/index`` where the cache root is either
    ``settings.cache_dir`` or the platform user cache directory for
    ``rust-releases``. The directory is not created here; the fetcher creates
    it on first download.

    Raises:
        ReleasesError: With kind ``CACHE_UNAVAILABLE`` when the platform cache
            directory cannot be determined.
    """

    cfg = settings or get_settings()
    if cfg.cache_dir is not None:
        return cfg.cache_dir / "index"
    try:
        base = platformdirs.user_cache_path(APP_NAME, APP_AUTHOR)
    except (OSError, RuntimeError, KeyError) as exc:
        raise ReleasesError.cache_unavailable(exc) from exc
    if not str(base):
        raise ReleasesError.cache_unavailable()
    return base / "index"
