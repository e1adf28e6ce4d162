"""Path utilities resolving where cached entries live on each platform."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from fetchcache.errors import DirectoryResolutionError

FALLBACK_DIR = "."


def platform_data_dir() -> Path:
    """Return the per-user data directory for the running platform.

    Windows uses ``%LOCALAPPDATA%``, macOS ``~/Library/Application Support``
    and other POSIX systems ``$XDG_DATA_HOME`` or ``~/.local/share``. Missing
    environment variables fall back to the current directory.
    """
    if sys.platform.startswith("win"):
        return Path(os.environ.get("LOCALAPPDATA", FALLBACK_DIR))

    if sys.platform == "darwin":
        home = os.environ.get("HOME")
        if not home:
            return Path(FALLBACK_DIR)
        return Path(home) / "Library" / "Application Support"

    if os.name == "posix":
        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg)
        home = os.environ.get("HOME")
        if home:
            return Path(home) / ".local" / "share"

    return Path(FALLBACK_DIR)


def resolve_data_dir(
    app_name: str | None = None,
    subfolder: str | None = None,
    *,
    create: bool = False,
) -> str:
    """Return the data directory for `app_name`/`subfolder` as text.

    Blank names are skipped. With `create`, the directory tree is made and any
    failure is raised as :class:`DirectoryResolutionError`.
    """
    path = platform_data_dir()
    for segment in (app_name, subfolder):
        if segment and segment.strip():
            path = path / segment.strip()

    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (OSError, ValueError) as exc:
            raise DirectoryResolutionError(f"Unable to create data directory {path!s}: {exc}") from exc

    return str(path)


def data_root_from_config(storage_root: str | Path) -> Path:
    """Return the resolved data root."""
    return Path(storage_root).expanduser().resolve()


__all__ = ["data_root_from_config", "platform_data_dir", "resolve_data_dir"]
