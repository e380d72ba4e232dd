"""Storage backends for cached artifacts.

This module provides:
- ShardPathMapper: Key to sharded path mapping
- ExpirationPolicy: Sidecar and modification-time expiry strategies
- ArtifactStore: Locked atomic file operations
- Cache: Abstract base class for caching
- FileSystemCache: File-based cache with TTL support
"""

from fscache.storage.artifact_store import ArtifactStore
from fscache.storage.cache.base import Cache
from fscache.storage.cache.file_caching import FileSystemCache
from fscache.storage.expiration import ExpirationPolicy, ModTimeExpiration, SidecarExpiration
from fscache.storage.paths import ShardPathMapper

__all__ = [
    "ArtifactStore",
    "Cache",
    "ExpirationPolicy",
    "FileSystemCache",
    "ModTimeExpiration",
    "ShardPathMapper",
    "SidecarExpiration",
]
