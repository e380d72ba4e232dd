"""Deterministic key to path mapping.

Keys are spread over four levels of single-character shard directories to
keep per-directory file counts bounded:

    {base_path}/
    └── {s0}/{s1}/{s2}/{s3}/
        ├── {name}[.{format}]          # artifact
        ├── {name}[.{format}].ttl      # expiry sidecar (sidecar strategy)
        └── {name}[.{format}].lock     # writer lock

With the hashed layout the shards are the first four hex characters of the
SHA-256 digest of the key and the name is the full digest. The legacy layout
uses the key's own first four characters and the key itself as the name,
which matches trees written by older releases.
"""

import hashlib
import os
from pathlib import Path

from fscache.consts import LOCK_SUFFIX, SHARD_DEPTH, TEMP_PREFIX, TTL_SUFFIX
from fscache.exceptions import InvalidKeyError
from fscache.models.model_settings import CacheFormat, ShardLayout


def hash_key(key: str) -> str:
    """Return the SHA-256 hex digest of a key."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class ShardPathMapper:
    """Maps cache keys to artifact paths under a base directory.

    Pure computation: nothing here touches the filesystem, so paths can be
    derived before any of their directories exist.
    """

    def __init__(
        self,
        base_path: Path,
        cache_format: CacheFormat = CacheFormat.NONE,
        layout: ShardLayout = ShardLayout.HASHED,
    ):
        self.base_path = Path(base_path)
        self.cache_format = cache_format
        self.layout = layout

    def _name(self, key: str) -> str:
        if self.layout is ShardLayout.HASHED:
            return hash_key(key)
        if key in (".", "..") or "\0" in key or os.sep in key or (os.altsep and os.altsep in key):
            raise InvalidKeyError(f"key cannot be mapped under the cache root: {key!r}")
        # Would name another key's sidecar, lock or temp file
        if key.endswith((TTL_SUFFIX, LOCK_SUFFIX)) or key.startswith(TEMP_PREFIX):
            raise InvalidKeyError(f"key collides with a companion file name: {key!r}")
        return key

    def shards(self, key: str) -> list[str]:
        """Shard directory names for a key.

        Legacy keys shorter than the shard depth yield empty names, which
        vanish when joined into a path.
        """
        name = self._name(key)
        return [name[i : i + 1] for i in range(SHARD_DEPTH)]

    def directory_path(self, key: str) -> Path:
        """Directory holding the artifact for a key."""
        return self.base_path.joinpath(*(s for s in self.shards(key) if s))

    def file_path(self, key: str) -> Path:
        """Artifact path for a key."""
        return self.directory_path(key) / f"{self._name(key)}{self.cache_format.suffix}"

    def ttl_path(self, key: str) -> Path:
        """Expiry sidecar path for a key."""
        return sidecar_path(self.file_path(key))

    def lock_path(self, key: str) -> Path:
        """Writer lock path for a key."""
        return lock_path(self.file_path(key))


def sidecar_path(artifact: Path) -> Path:
    return artifact.with_name(artifact.name + TTL_SUFFIX)


def lock_path(artifact: Path) -> Path:
    return artifact.with_name(artifact.name + LOCK_SUFFIX)
