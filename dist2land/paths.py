"""Per-user cache locations."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

APP_NAME = "dist2land"


def _env_path(key: str) -> Path | None:
    value = os.environ.get(key)
    return Path(value) if value else None


def _temp_dir() -> Path:
    return Path(tempfile.gettempdir())


def cache_root_dir() -> Path:
    """Return the platform-specific cache directory for the application."""
    if sys.platform == "win32":
        base = _env_path("LOCALAPPDATA") or _temp_dir()
        return base / APP_NAME
    if sys.platform == "darwin":
        home = _env_path("HOME") or _temp_dir()
        return home / "Library" / "Caches" / APP_NAME
    xdg = _env_path("XDG_CACHE_HOME")
    if xdg is not None:
        return xdg / APP_NAME
    home = _env_path("HOME") or _temp_dir()
    return home / ".cache" / APP_NAME


def provider_dir(provider_id: str) -> Path:
    """Return the cache directory of one provider."""
    return cache_root_dir() / "providers" / provider_id


def downloads_dir() -> Path:
    """Return the directory where downloaded archives are kept."""
    return cache_root_dir() / "downloads"