"""Storage layer for Rit.

This module provides the storage backends and the content-addressable
object store built on top of them.
"""

from rit.storage.backends import FileSystemBackend, MemoryBackend, StorageBackend
from rit.storage.object_store import ObjectStore

__all__ = [
    "StorageBackend",
    "FileSystemBackend",
    "MemoryBackend",
    "ObjectStore",
]
