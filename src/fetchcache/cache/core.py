"""Content-addressed local cache for remote resources.

Each entry is a single flat file under the cache root whose name is
``derive_filename(key)``. Nothing else is persisted: no index, no fetch time,
no source URL. A present file is trusted until it is explicitly invalidated
or refreshed.

Blocking and awaitable methods share the same helpers and differ only in how
I/O is issued. Awaitable variants push filesystem calls to a worker thread
and use :class:`AsyncHttpTransport` for the network.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from fetchcache.errors import CacheIOError, DirectoryResolutionError, EntryNotFoundError, PathEncodingError
from fetchcache.io.transport import AsyncHttpTransport, HttpTransport
from fetchcache.util.hashing import derive_filename, encode_content
from fetchcache.util.logging import configure_logging
from fetchcache.util.paths import data_root_from_config, resolve_data_dir
from fetchcache.util.typing import SupportsAsyncFetch, SupportsFetch

if TYPE_CHECKING:
    from fetchcache.config import FetchCacheConfig

logger = logging.getLogger(__name__)

CACHE_SUBFOLDER = "cache"
PARTIAL_SUFFIX = ".download"


def _entry_exists(path: Path) -> bool:
    """Return whether `path` exists; errors other than absence propagate."""
    try:
        path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return False
    return True


def _write_entry(path: Path, payload: bytes) -> None:
    """Write `payload` to a private temp file, then rename it over `path`.

    Concurrent writers for one key each use their own temp file; the last
    rename wins.
    """
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}{PARTIAL_SUFFIX}")
    try:
        # 0o666 so the entry mode follows the process umask.
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0), 0o666)
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        tmp_path.replace(path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise CacheIOError(f"Unable to write cache entry {path.name}: {exc}") from exc


def _read_entry(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise CacheIOError(f"Unable to read cache entry {path.name}: {exc}") from exc


def _remove_entry(path: Path) -> None:
    try:
        exists = _entry_exists(path)
    except OSError as exc:
        raise CacheIOError(f"File check failed for cache entry {path.name}: {exc}") from exc
    if not exists:
        raise EntryNotFoundError(f"No cached file for entry {path.name}")
    try:
        path.unlink()
    except OSError as exc:
        raise CacheIOError(f"Unable to delete cache entry {path.name}: {exc}") from exc


def path_text(path: PurePath) -> str:
    """Return `path` as text, refusing names that are not valid UTF-8."""
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise PathEncodingError(f"Cache entry path is not valid unicode: {text!r}") from exc
    return text


class ContentCache:
    """Get-or-fetch cache rooted at one existing directory."""

    def __init__(
        self,
        root: str | Path,
        *,
        transport: SupportsFetch | None = None,
        async_transport: SupportsAsyncFetch | None = None,
    ) -> None:
        self._root = data_root_from_config(root)
        self._transport = transport
        self._async_transport = async_transport

    @classmethod
    def open(
        cls,
        app_name: str | None = None,
        *,
        transport: SupportsFetch | None = None,
        async_transport: SupportsAsyncFetch | None = None,
    ) -> "ContentCache":
        """Create a cache under the platform data directory for `app_name`."""
        root = resolve_data_dir(app_name, CACHE_SUBFOLDER, create=True)
        return cls(root, transport=transport, async_transport=async_transport)

    @classmethod
    def from_config(cls, config: "FetchCacheConfig") -> "ContentCache":
        """Create a cache and both transports from a loaded configuration.

        The ``logging`` section is applied to the package logger first.
        """
        configure_logging(level=config.logging.level, log_path=config.logging.log_path)
        settings = config.transport
        transport = HttpTransport(timeout_seconds=settings.timeout_seconds, user_agent=settings.user_agent)
        async_transport = AsyncHttpTransport(
            timeout_seconds=settings.timeout_seconds, user_agent=settings.user_agent
        )
        if config.cache.root is not None:
            root = data_root_from_config(config.cache.root)
            try:
                root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DirectoryResolutionError(f"Unable to create cache root {root!s}: {exc}") from exc
            return cls(root, transport=transport, async_transport=async_transport)
        return cls.open(config.cache.app_name, transport=transport, async_transport=async_transport)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def transport(self) -> SupportsFetch:
        if self._transport is None:
            self._transport = HttpTransport()
        return self._transport

    @property
    def async_transport(self) -> SupportsAsyncFetch:
        if self._async_transport is None:
            self._async_transport = AsyncHttpTransport()
        return self._async_transport

    def entry_path(self, key: str) -> Path:
        """Return the on-disk location for `key` (it may not exist yet)."""
        return self._root / derive_filename(key)

    def _needs_fetch(self, path: Path, exists: bool | None, error: OSError | None) -> bool:
        if error is not None:
            logger.warning("Issue finding cache file %s (%s); downloading again", path, error)
            return True
        return not exists

    # Blocking API

    def get_local_path(self, source: str, token: str | None = None) -> str:
        """Return the local path for `source`, fetching it on first access."""
        return self.get_named_path(source, source, token)

    def get_named_path(self, source: str, name: str, token: str | None = None) -> str:
        """Return the local path stored under `name`, fetching `source` on a miss.

        `token` is sent as a bearer credential only when a fetch happens; it
        never affects the entry name.
        """
        path = self.entry_path(name)
        exists: bool | None = None
        error: OSError | None = None
        try:
            exists = _entry_exists(path)
        except OSError as exc:
            error = exc

        if self._needs_fetch(path, exists, error):
            payload = self.transport.fetch(source, token=token)
            _write_entry(path, payload)
            logger.debug("Cached %d bytes from %s as %s", len(payload), source, path.name)

        return path_text(path)

    def get_encoded_content(self, source: str, token: str | None = None) -> str:
        """Return the cached bytes for `source` as standard base64 text."""
        return self.get_named_encoded_content(source, source, token)

    def get_named_encoded_content(self, source: str, name: str, token: str | None = None) -> str:
        path = self.get_named_path(source, name, token)
        return encode_content(_read_entry(Path(path)))

    def invalidate(self, key: str) -> None:
        """Delete the entry for `key`; a missing entry is an error."""
        _remove_entry(self.entry_path(key))
        logger.debug("Invalidated cache entry for %s", key)

    def refresh(self, key: str, source: str | None = None, token: str | None = None) -> str:
        """Invalidate `key` and fetch it again from `source` (default: `key`)."""
        self.invalidate(key)
        return self.get_named_path(source or key, key, token)

    # Awaitable API

    async def get_local_path_async(self, source: str, token: str | None = None) -> str:
        return await self.get_named_path_async(source, source, token)

    async def get_named_path_async(self, source: str, name: str, token: str | None = None) -> str:
        """Awaitable counterpart of :meth:`get_named_path`."""
        path = self.entry_path(name)
        exists: bool | None = None
        error: OSError | None = None
        try:
            exists = await asyncio.to_thread(_entry_exists, path)
        except OSError as exc:
            error = exc

        if self._needs_fetch(path, exists, error):
            payload = await self.async_transport.fetch(source, token=token)
            await asyncio.to_thread(_write_entry, path, payload)
            logger.debug("Cached %d bytes from %s as %s", len(payload), source, path.name)

        return path_text(path)

    async def get_encoded_content_async(self, source: str, token: str | None = None) -> str:
        return await self.get_named_encoded_content_async(source, source, token)

    async def get_named_encoded_content_async(self, source: str, name: str, token: str | None = None) -> str:
        path = await self.get_named_path_async(source, name, token)
        payload = await asyncio.to_thread(_read_entry, Path(path))
        return encode_content(payload)

    async def invalidate_async(self, key: str) -> None:
        await asyncio.to_thread(_remove_entry, self.entry_path(key))
        logger.debug("Invalidated cache entry for %s", key)

    async def refresh_async(self, key: str, source: str | None = None, token: str | None = None) -> str:
        await self.invalidate_async(key)
        return await self.get_named_path_async(source or key, key, token)

    def __repr__(self) -> str:
        return f"ContentCache(root={self._root!s})"


__all__ = ["CACHE_SUBFOLDER", "ContentCache", "path_text"]
