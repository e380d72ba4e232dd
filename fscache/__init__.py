"""fscache - sharded filesystem cache with TTL support."""

from fscache.exceptions import CacheError, ConfigurationError, InvalidKeyError
from fscache.models import CacheFormat, CacheSettings, CacheStats, ExpirationStrategy, ShardLayout
from fscache.storage import Cache, FileSystemCache

__version__ = "1.0.0"

__all__ = [
    "Cache",
    "CacheError",
    "CacheFormat",
    "CacheSettings",
    "CacheStats",
    "ConfigurationError",
    "ExpirationStrategy",
    "FileSystemCache",
    "InvalidKeyError",
    "ShardLayout",
]
