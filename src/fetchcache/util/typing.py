"""Shared typing helpers for fetchcache modules."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SupportsFetch(Protocol):
    """Blocking transports that return the full body of a GET."""

    def fetch(self, url: str, *, token: str | None = None) -> bytes:
        """Return the response body for `url`."""
        ...


@runtime_checkable
class SupportsAsyncFetch(Protocol):
    """Awaitable transports that return the full body of a GET."""

    async def fetch(self, url: str, *, token: str | None = None) -> bytes:
        """Return the response body for `url`."""
        ...


__all__ = ["SupportsAsyncFetch", "SupportsFetch"]
