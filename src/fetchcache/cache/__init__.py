"""Content cache public surface."""

from .core import CACHE_SUBFOLDER, ContentCache, path_text

__all__ = ["CACHE_SUBFOLDER", "ContentCache", "path_text"]
