from __future__ import annotations

import asyncio
import base64
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from fetchcache.cache import ContentCache
from fetchcache.errors import CacheIOError, EntryNotFoundError, TransportError
from fetchcache.util.hashing import derive_filename
from tests.helpers import JPEG_BYTES, FakeAsyncTransport

URL = "https://www.google.com/s2/favicons?sz=64&domain=cnn.com"
OTHER_URL = "https://www.google.com/s2/favicons?sz=64&domain=walmart.com"


class AsyncContentCacheTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.transport = FakeAsyncTransport({URL: JPEG_BYTES, OTHER_URL: b"walmart"})
        self.cache = ContentCache(self.root, async_transport=self.transport)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_miss_then_hit(self) -> None:
        first = await self.cache.get_local_path_async(URL)
        second = await self.cache.get_local_path_async(URL)

        self.assertEqual(first, second)
        self.assertEqual(Path(first).read_bytes(), JPEG_BYTES)
        self.assertEqual(self.transport.calls, [(URL, None)])

    async def test_named_path_with_token(self) -> None:
        path = await self.cache.get_named_path_async(URL, "file1", token="secret")

        self.assertEqual(
            Path(path).name,
            "S6ZZaVaoYQsQDYaR7piO7byg3ThvoCZk4Gg4GWCVxac-qy1RvtBWTmdbS0OeEhJMviRfOG7fsVqGQcPoGIVD-w",
        )
        self.assertEqual(self.transport.calls, [(URL, "secret")])

    async def test_existence_check_error_keeps_token(self) -> None:
        with patch("fetchcache.cache.core._entry_exists", side_effect=PermissionError("denied")):
            with self.assertLogs("fetchcache.cache.core", level="WARNING"):
                await self.cache.get_named_path_async(URL, "file1", token="secret")

        self.assertEqual(self.transport.calls, [(URL, "secret")])

    async def test_fetch_failure_propagates(self) -> None:
        with self.assertRaises(TransportError):
            await self.cache.get_named_encoded_content_async(
                "http://invalidwesite.com/fake_file.unknown", "useless_invalid"
            )
        self.assertFalse(self.cache.entry_path("useless_invalid").exists())

    async def test_encoded_content(self) -> None:
        encoded = await self.cache.get_encoded_content_async(URL)
        self.assertEqual(base64.b64decode(encoded), JPEG_BYTES)

        named = await self.cache.get_named_encoded_content_async(OTHER_URL, "file2", token="tok")
        self.assertEqual(base64.b64decode(named), b"walmart")

    async def test_invalidate_and_refetch(self) -> None:
        await self.cache.get_named_path_async(OTHER_URL, "file4")
        await self.cache.invalidate_async("file4")
        self.assertFalse(self.cache.entry_path("file4").exists())

        await self.cache.get_named_path_async(OTHER_URL, "file4")
        self.assertEqual(len(self.transport.calls), 2)

    async def test_invalidate_missing_fails(self) -> None:
        with self.assertRaises(EntryNotFoundError):
            await self.cache.invalidate_async("never-cached")

    async def test_invalidate_check_error_propagates(self) -> None:
        with patch("fetchcache.cache.core._entry_exists", side_effect=PermissionError("denied")):
            with self.assertRaises(CacheIOError):
                await self.cache.invalidate_async(URL)

    async def test_refresh_refetches(self) -> None:
        await self.cache.get_local_path_async(URL)
        self.transport.bodies[URL] = b"fresh"

        path = await self.cache.refresh_async(URL)

        self.assertEqual(Path(path).read_bytes(), b"fresh")
        self.assertEqual(len(self.transport.calls), 2)

    async def test_refresh_with_name_source_and_token(self) -> None:
        await self.cache.get_named_path_async(URL, "logo")
        path = await self.cache.refresh_async("logo", source=OTHER_URL, token="tok")

        self.assertEqual(Path(path).name, derive_filename("logo"))
        self.assertEqual(Path(path).read_bytes(), b"walmart")
        self.assertEqual(self.transport.calls[-1], (OTHER_URL, "tok"))

    async def test_refresh_uncached_fails(self) -> None:
        with self.assertRaises(EntryNotFoundError):
            await self.cache.refresh_async(URL)
        self.assertEqual(self.transport.calls, [])

    async def test_concurrent_misses_both_succeed(self) -> None:
        first, second = await asyncio.gather(
            self.cache.get_local_path_async(URL),
            self.cache.get_local_path_async(URL),
        )

        self.assertEqual(first, second)
        self.assertEqual(Path(first).read_bytes(), JPEG_BYTES)
        self.assertGreaterEqual(len(self.transport.calls), 1)
        self.assertLessEqual(len(self.transport.calls), 2)


if __name__ == "__main__":
    unittest.main()
