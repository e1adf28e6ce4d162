from __future__ import annotations

import requests

from fetchcache.errors import TransportError

JPEG_BYTES = bytes([0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46, 0x49, 0x46, 0x00])


class DummyResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeTransport:
    """Serves canned bodies and records every call.

    With ``once=True`` a second request for the same URL raises, which makes
    accidental re-fetches fail loudly.
    """

    def __init__(self, bodies: dict[str, bytes] | None = None, *, once: bool = False) -> None:
        self.bodies = dict(bodies or {})
        self.once = once
        self.calls: list[tuple[str, str | None]] = []

    def _respond(self, url: str, token: str | None) -> bytes:
        if self.once and any(called == url for called, _ in self.calls):
            raise TransportError(f"unexpected second request for {url}")
        self.calls.append((url, token))
        if url not in self.bodies:
            raise TransportError(f"HTTP 404 for {url}")
        return self.bodies[url]

    def fetch(self, url: str, *, token: str | None = None) -> bytes:
        return self._respond(url, token)


class FakeAsyncTransport(FakeTransport):
    async def fetch(self, url: str, *, token: str | None = None) -> bytes:  # type: ignore[override]
        return self._respond(url, token)
