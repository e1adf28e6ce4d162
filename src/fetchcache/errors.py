"""Typed errors raised by the content cache and its collaborators."""

from __future__ import annotations


class FetchCacheError(RuntimeError):
    """Base class for every failure surfaced by fetchcache."""


class DirectoryResolutionError(FetchCacheError):
    """The cache base directory could not be determined or created."""


class InvalidSourceError(FetchCacheError):
    """The fetch source is not a usable http(s) location."""


class TransportError(FetchCacheError):
    """Network failure, timeout, or non-success response while fetching."""


class CacheIOError(FetchCacheError):
    """Local create, write, read, or delete of a cache entry failed."""


class PathEncodingError(FetchCacheError):
    """A cache entry path cannot be represented as valid text."""


class EntryNotFoundError(FetchCacheError):
    """Invalidation was requested for a key with no cached file."""


__all__ = [
    "CacheIOError",
    "DirectoryResolutionError",
    "EntryNotFoundError",
    "FetchCacheError",
    "InvalidSourceError",
    "PathEncodingError",
    "TransportError",
]
