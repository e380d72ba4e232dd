"""File-based cache implementation.

Stores raw byte artifacts in a sharded directory tree under a base path.
Supports optional TTL (time-to-live) per entry or store-wide, recorded either
in sidecar files or in the artifact's modification time.
"""

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fscache.config import build_settings, resolve_base_path
from fscache.consts import DEFAULT_CACHE_DIR, LOCK_TIMEOUT
from fscache.diagnostics import report
from fscache.exceptions import InvalidKeyError
from fscache.models.model_settings import (
    CacheFormat,
    CacheSettings,
    ExpirationStrategy,
    ShardLayout,
)
from fscache.models.model_stats import CacheStats
from fscache.storage.artifact_store import ArtifactStore, is_blank
from fscache.storage.cache.base import Cache
from fscache.storage.expiration import (
    TTL,
    ExpirationPolicy,
    ModTimeExpiration,
    SidecarExpiration,
)
from fscache.storage.paths import ShardPathMapper

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CacheState:
    """Everything derived from one configuration, swapped as a unit."""

    settings: CacheSettings
    base_path: Path
    mapper: ShardPathMapper
    policy: ExpirationPolicy
    store: ArtifactStore


def _make_policy(strategy: ExpirationStrategy, log: logging.Logger) -> ExpirationPolicy:
    if strategy is ExpirationStrategy.MTIME:
        return ModTimeExpiration(log)
    return SidecarExpiration(log)


def _to_bytes(value: Any) -> bytes | None:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    return None


class FileSystemCache(Cache):
    """Filesystem cache with sharded layout and TTL support.

    Directory structure (hashed layout):
        {base_path}/
        └── {h0}/{h1}/{h2}/{h3}/
            ├── {sha256(key)}[.{format}]        # artifact
            ├── {sha256(key)}[.{format}].ttl    # expiry (sidecar strategy)
            └── {sha256(key)}[.{format}].lock   # writer lock

    Values are stored as bytes; str values are UTF-8 encoded. Expired
    entries are hidden from get() but stay on disk until overwritten,
    deleted or cleared.
    """

    def __init__(
        self,
        base_path: Path | str | None = None,
        default_ttl: TTL | None = None,
        cache_format: CacheFormat | str = CacheFormat.NONE,
        expiration: ExpirationStrategy | str = ExpirationStrategy.SIDECAR,
        layout: ShardLayout | str = ShardLayout.HASHED,
        lock_timeout: float = LOCK_TIMEOUT,
        log: logging.Logger | None = None,
    ):
        """Initialize FileSystemCache.

        Args:
            base_path: Cache root, created if missing. Defaults to DEFAULT_CACHE_DIR.
            default_ttl: Store-wide TTL in seconds or as a timedelta. None means no expiry.
            cache_format: Cosmetic artifact filename suffix.
            expiration: Where entry expiry is recorded.
            layout: Key to path mapping.
            lock_timeout: Seconds a writer waits for the artifact lock.
            log: Diagnostics sink. Defaults to the module logger.

        Raises:
            ConfigurationError: If the configuration is invalid or the base
                path cannot be created or resolved.
        """
        self.logger = log or logger
        settings = build_settings(
            base_path=DEFAULT_CACHE_DIR if base_path is None else base_path,
            default_ttl=default_ttl,
            format=cache_format,
            expiration=expiration,
            layout=layout,
            lock_timeout=lock_timeout,
        )
        self._state = self._build_state(settings)

    @classmethod
    def from_settings(cls, settings: CacheSettings, log: logging.Logger | None = None) -> "FileSystemCache":
        """Create a cache from a prepared CacheSettings."""
        return cls(
            base_path=settings.base_path,
            default_ttl=settings.default_ttl,
            cache_format=settings.format,
            expiration=settings.expiration,
            layout=settings.layout,
            lock_timeout=settings.lock_timeout,
            log=log,
        )

    def _build_state(self, settings: CacheSettings) -> _CacheState:
        base_path = resolve_base_path(settings.base_path, self.logger)
        return _CacheState(
            settings=settings,
            base_path=base_path,
            mapper=ShardPathMapper(base_path, settings.format, settings.layout),
            policy=_make_policy(settings.expiration, self.logger),
            store=ArtifactStore(settings.lock_timeout, self.logger),
        )

    def reconfigure(self, **changes: Any) -> None:
        """Replace part of the configuration.

        The new configuration is validated in full before it replaces the
        current one, so a failed call leaves the cache untouched. Accepts the
        CacheSettings field names (base_path, default_ttl, format,
        expiration, layout, lock_timeout).

        Raises:
            ConfigurationError: If the new configuration is invalid.
        """
        current = self._state.settings.model_dump()
        settings = build_settings(**{**current, **changes})
        self._state = self._build_state(settings)
        report(self.logger, logging.INFO, f"Reconfigured cache at {self._state.base_path}")

    # === CONFIGURATION ===

    @property
    def settings(self) -> CacheSettings:
        return self._state.settings

    @property
    def base_path(self) -> Path:
        """Canonical absolute cache root."""
        return self._state.base_path

    @property
    def default_ttl(self) -> float | None:
        return self._state.settings.default_ttl

    @property
    def format(self) -> CacheFormat:
        return self._state.settings.format

    # === KEYS AND PATHS ===

    def _validate_key(self, key: str) -> None:
        if not isinstance(key, str):
            raise InvalidKeyError(f"cache key must be a string, got {type(key).__name__}")
        if key == "":
            raise InvalidKeyError("empty cache key")

    def path_for(self, key: str) -> Path:
        """Artifact path for a key. The file may not exist."""
        self._validate_key(key)
        return self._state.mapper.file_path(key)

    def _invalidate(self, state: _CacheState, path: Path) -> None:
        """Drop whatever is stored at path after a failed write."""
        state.store.remove(path)
        try:
            state.policy.discard(path)
        except OSError as e:
            report(self.logger, logging.ERROR, f"Failed to remove expiry metadata for {path}: {e}")

    # === CACHE OPERATIONS ===

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value from the cache.

        Args:
            key: Unique identifier for the cached value.
            default: Returned when the value is missing, unreadable or expired.

        Returns:
            Cached bytes if found and not expired, default otherwise.

        Raises:
            InvalidKeyError: If the key is empty.
        """
        self._validate_key(key)
        state = self._state
        path = state.mapper.file_path(key)

        data = state.store.read(path)
        if data is None:
            return default

        if state.policy.is_expired(path):
            report(self.logger, logging.DEBUG, f"Cache expired for key={key}")
            return default
        return data

    def set(self, key: str, value: Any, ttl: TTL | None = None) -> bool:
        """Store a value in the cache.

        Old content is never served under the new expiry. If a step fails
        after the write lock is taken, the key is left without a value rather
        than with a stale one. If the lock cannot be taken in time, whatever
        the lock holder stores is left alone.

        Args:
            key: Unique identifier for the cached value.
            value: bytes or str. Empty or whitespace-only values are not stored.
            ttl: Seconds or timedelta. None uses the cache's default TTL.

        Returns:
            True if the value was stored, False otherwise.

        Raises:
            InvalidKeyError: If the key is empty.
        """
        self._validate_key(key)
        state = self._state

        data = _to_bytes(value)
        if data is None:
            report(self.logger, logging.ERROR, f"Unsupported value type {type(value).__name__} for key={key}")
            return False
        if is_blank(data):
            report(self.logger, logging.INFO, f"Cache value is empty, not storing key={key}")
            return False

        now = time.time()
        try:
            expires_at = state.policy.expiry_for(ttl if ttl is not None else state.settings.default_ttl, now)
        except TypeError as e:
            report(self.logger, logging.ERROR, f"Invalid TTL for key={key}: {e}")
            return False

        path = state.mapper.file_path(key)

        def stage_expiry(staged: Path) -> None:
            state.policy.apply(staged, path, expires_at, now)

        def commit_expiry(published: Path) -> None:
            state.policy.commit(published, expires_at)

        def invalidate(target: Path) -> None:
            self._invalidate(state, target)

        stored = state.store.write(
            path,
            data,
            before_publish=stage_expiry,
            after_publish=commit_expiry,
            on_failure=invalidate,
        )
        if stored:
            report(self.logger, logging.DEBUG, f"Cached key={key} (expires_at={expires_at})")
        return stored

    def delete(self, key: str) -> bool:
        """Delete a value from the cache.

        The artifact and its expiry metadata are removed. The ``.lock``
        companion stays until clear(), since a concurrent writer may be
        waiting on it.

        Returns:
            True if the value was deleted or was not present, False on I/O error.

        Raises:
            InvalidKeyError: If the key is empty.
        """
        self._validate_key(key)
        state = self._state
        path = state.mapper.file_path(key)

        if not state.store.remove(path):
            return False
        try:
            state.policy.discard(path)
        except OSError as e:
            report(self.logger, logging.ERROR, f"Failed to remove expiry metadata for key={key}: {e}")
            return False
        return True

    def has(self, key: str) -> bool:
        """Check if an artifact exists for a key, regardless of its expiry.

        Raises:
            InvalidKeyError: If the key is empty.
        """
        self._validate_key(key)
        state = self._state
        return state.store.exists(state.mapper.file_path(key))

    def clear(self) -> bool:
        """Remove every file and directory under the base path."""
        state = self._state
        return state.store.clear(state.base_path)

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """Get several values.

        Misses, unreadable and expired entries map to default; the batch is
        never aborted for them.

        Raises:
            InvalidKeyError: If any key is empty.
        """
        return super().get_multiple(keys, default)

    def set_multiple(self, values: Mapping[str, Any] | Iterable[tuple[str, Any]], ttl: TTL | None = None) -> bool:
        """Store several values, stopping at the first one that fails.

        Values stored before the failure are kept.

        Raises:
            InvalidKeyError: If a key reached before any failure is empty.
        """
        ok = super().set_multiple(values, ttl)
        if not ok:
            report(self.logger, logging.WARNING, "set_multiple stopped at the first failing key")
        return ok

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Delete several values, stopping at the first one that fails."""
        ok = super().delete_multiple(keys)
        if not ok:
            report(self.logger, logging.WARNING, "delete_multiple stopped at the first failing key")
        return ok

    # === EXPIRY INSPECTION ===

    def has_ttl(self, key: str) -> bool:
        """Check if the entry for a key carries an expiry."""
        self._validate_key(key)
        state = self._state
        return state.policy.has_expiry(state.mapper.file_path(key))

    def is_expired(self, key: str) -> bool:
        """Check if the entry for a key is expired. Unreadable expiry counts as expired."""
        self._validate_key(key)
        state = self._state
        return state.policy.is_expired(state.mapper.file_path(key))

    def get_stats(self) -> CacheStats:
        """Walk the cache tree and count artifacts.

        Returns:
            CacheStats for the current base path.
        """
        state = self._state
        now = time.time()
        total = 0
        expired = 0
        total_bytes = 0

        for path in state.store.iter_artifacts(state.base_path):
            try:
                size = path.stat().st_size
            except OSError:
                continue
            total += 1
            total_bytes += size
            if state.policy.is_expired(path, now):
                expired += 1

        return CacheStats(
            base_path=str(state.base_path),
            total_entries=total,
            expired_entries=expired,
            total_bytes=total_bytes,
        )


def main() -> None:
    """Example usage of FileSystemCache."""
    import tempfile

    logging.basicConfig(level=logging.DEBUG)

    # Use temporary directory for example
    with tempfile.TemporaryDirectory() as tmpdir:
        cache = FileSystemCache(base_path=tmpdir, cache_format=CacheFormat.TXT)

        print("=== FileSystemCache Example ===\n")

        print("1. Storing values in cache...")
        cache.set("page:home", "<h1>Home</h1>")
        cache.set("page:about", b"<h1>About</h1>", ttl=1)
        print(f"   page:home stored at {cache.path_for('page:home')}")

        print("\n2. Retrieving values...")
        print(f"   page:home = {cache.get('page:home')!r}")
        print(f"   page:about = {cache.get('page:about')!r}")

        print("\n3. Waiting 1.5 seconds for page:about to expire...")
        time.sleep(1.5)
        print(f"   page:about = {cache.get('page:about', 'fallback')!r}")
        print(f"   page:about still on disk: {cache.has('page:about')}")

        print("\n4. Cache statistics...")
        print(f"   {cache.get_stats()}")

        print("\n5. Clearing cache...")
        print(f"   Cleared: {cache.clear()}")
        print(f"   page:home exists after clear: {cache.has('page:home')}")


if __name__ == "__main__":
    main()
