"""HTTP transports used to populate cache entries on a miss."""

from __future__ import annotations

import os
import platform
import sys
from collections.abc import Mapping
from importlib.metadata import PackageNotFoundError, version
from types import TracebackType
from urllib.parse import urlsplit

import httpx
import requests

from fetchcache.errors import InvalidSourceError, TransportError

DEFAULT_TIMEOUT_SECONDS = 10.0
ALLOWED_SCHEMES = frozenset({"http", "https"})


def _package_version() -> str:
    try:
        return version("fetchcache")
    except PackageNotFoundError:
        return "0.1.0"


DEFAULT_USER_AGENT = (
    f"Mozilla/5.0 ({os.name}; {sys.platform}; {platform.machine() or 'unknown'}) "
    f"fetchcache/{_package_version()}"
)


def validate_source(url: str) -> str:
    """Return `url` unchanged if it names an http(s) resource."""
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidSourceError(f"Cannot parse fetch source {url!r}: {exc}") from exc
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.netloc:
        raise InvalidSourceError(f"Fetch source {url!r} is not an http(s) URL")
    return url


def build_headers(user_agent: str, token: str | None) -> dict[str, str]:
    headers = {"User-Agent": user_agent, "Accept": "*/*"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class HttpTransport:
    """Blocking GET transport backed by a single ``requests.Session``."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self._session = session or requests.Session()

    def fetch(self, url: str, *, token: str | None = None) -> bytes:
        """Download `url` and return the body; failures raise TransportError."""
        validate_source(url)
        try:
            response = self._session.get(
                url,
                headers=build_headers(self.user_agent, token),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.InvalidURL as exc:
            raise InvalidSourceError(f"Invalid fetch source {url!r}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc
        return response.content

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncHttpTransport:
    """Awaitable GET transport backed by ``httpx.AsyncClient``.

    An injected client is reused for every request and closed by
    :meth:`aclose`. Without one, each fetch opens a short-lived client.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self._client = client

    async def fetch(self, url: str, *, token: str | None = None) -> bytes:
        """Download `url` and return the body; failures raise TransportError."""
        validate_source(url)
        headers: Mapping[str, str] = build_headers(self.user_agent, token)
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=headers, timeout=self.timeout_seconds, follow_redirects=True
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds, follow_redirects=True) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.InvalidURL as exc:
            raise InvalidSourceError(f"Invalid fetch source {url!r}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc
        return response.content

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = [
    "ALLOWED_SCHEMES",
    "AsyncHttpTransport",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_USER_AGENT",
    "HttpTransport",
    "build_headers",
    "validate_source",
]
