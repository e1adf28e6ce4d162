"""Hashing helpers that turn cache keys into on-disk names."""

from __future__ import annotations

import base64
import hashlib


def derive_filename(key: str) -> str:
    """Return the base64url (unpadded) SHA3-512 digest of `key`.

    The result is 86 characters from ``[A-Za-z0-9_-]`` for any input.
    """
    digest = hashlib.sha3_512(key.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def encode_content(data: bytes) -> str:
    """Return `data` as standard, padded base64 text."""
    return base64.b64encode(data).decode("ascii")


__all__ = ["derive_filename", "encode_content"]
