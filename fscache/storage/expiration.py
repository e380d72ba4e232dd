"""Expiration strategies for cached artifacts.

Two interchangeable strategies record when an entry stops being served:

- SidecarExpiration writes the absolute expiry timestamp into a companion
  ``.ttl`` file next to the artifact.
- ModTimeExpiration stores the expiry as the artifact's own modification
  time, so no extra file exists.

The strategies are not interoperable: a tree written with one must be read
with the same one.

Boundary: an entry is expired once ``now >= expires_at``. A value stored
with ttl=T is served while less than T seconds have elapsed.

Metadata read errors fail closed: the entry is reported as expired.
"""

import logging
import math
import os
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from pathlib import Path

from fscache.consts import NEVER_EXPIRES
from fscache.diagnostics import report
from fscache.storage.atomic import write_bytes_atomic
from fscache.storage.paths import sidecar_path

logger = logging.getLogger(__name__)

TTL = int | float | timedelta


def ttl_to_seconds(ttl: TTL | None) -> float | None:
    """Normalize a TTL to seconds."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    if isinstance(ttl, bool) or not isinstance(ttl, int | float):
        raise TypeError(f"unsupported TTL type: {type(ttl).__name__}")
    return float(ttl)


class ExpirationPolicy(ABC):
    """Computes, persists and evaluates the expiry of cache entries."""

    def __init__(self, log: logging.Logger | None = None):
        self.logger = log or logger

    @staticmethod
    def expiry_for(ttl: TTL | None, now: float) -> float | None:
        """Absolute expiry timestamp for a TTL, or None for no expiry."""
        seconds = ttl_to_seconds(ttl)
        if seconds is None:
            return None
        return now + seconds

    def apply(self, staged: Path, artifact: Path, expires_at: float | None, now: float) -> None:
        """Record expiry on content staged at ``staged``, before it replaces ``artifact``.

        Raises:
            OSError: If the expiry could not be recorded.
        """
        return None

    def commit(self, artifact: Path, expires_at: float | None) -> None:
        """Record expiry kept outside ``artifact``, once the new content is published.

        Until this returns, readers may see the new content with the previous
        metadata, never the previous content with the new metadata.

        Raises:
            OSError: If the expiry could not be recorded.
        """
        return None

    @abstractmethod
    def is_expired(self, artifact: Path, now: float | None = None) -> bool:
        """Check whether the entry stored at ``artifact`` is expired. Never raises."""
        ...

    @abstractmethod
    def has_expiry(self, artifact: Path) -> bool:
        """Check whether the entry stored at ``artifact`` carries an expiry."""
        ...

    @abstractmethod
    def discard(self, artifact: Path) -> None:
        """Remove expiry metadata kept outside the artifact.

        Raises:
            OSError: If existing metadata could not be removed.
        """
        ...


class SidecarExpiration(ExpirationPolicy):
    """Expiry stored as ASCII decimal unix time in ``<artifact>.ttl``.

    The sidecar is replaced atomically so readers see either the previous or
    the new timestamp, never a partial one. It is written only after the new
    artifact is in place, so a previous expiry can briefly hide new content
    but a new expiry never revives old content.
    """

    def commit(self, artifact: Path, expires_at: float | None) -> None:
        if expires_at is None:
            self.discard(artifact)
            return

        write_bytes_atomic(sidecar_path(artifact), f"{expires_at:.6f}".encode("ascii"))

    def read_expiry(self, artifact: Path) -> float | None:
        """Stored expiry timestamp, or None if the entry has no sidecar.

        Raises:
            OSError: If the sidecar exists but cannot be read.
            ValueError: If the sidecar does not hold a finite number.
        """
        try:
            text = sidecar_path(artifact).read_text(encoding="ascii")
        except FileNotFoundError:
            return None
        value = float(text.strip())
        if not math.isfinite(value):
            raise ValueError(f"non-finite expiry timestamp: {text!r}")
        return value

    def is_expired(self, artifact: Path, now: float | None = None) -> bool:
        try:
            expires_at = self.read_expiry(artifact)
        except (OSError, ValueError) as e:
            report(self.logger, logging.WARNING, f"Unreadable TTL sidecar for {artifact}, treating as expired: {e}")
            return True
        if expires_at is None:
            return False
        return (time.time() if now is None else now) >= expires_at

    def has_expiry(self, artifact: Path) -> bool:
        return sidecar_path(artifact).exists()

    def discard(self, artifact: Path) -> None:
        sidecar_path(artifact).unlink(missing_ok=True)


class ModTimeExpiration(ExpirationPolicy):
    """Expiry stored as the artifact's modification time.

    The access time records when the entry was written. Entries without a TTL
    get a far-future modification time.
    """

    def apply(self, staged: Path, artifact: Path, expires_at: float | None, now: float) -> None:
        # os.replace keeps the staged file's timestamps
        os.utime(staged, (now, NEVER_EXPIRES if expires_at is None else expires_at))

    def is_expired(self, artifact: Path, now: float | None = None) -> bool:
        try:
            mtime = artifact.stat().st_mtime
        except OSError as e:
            report(self.logger, logging.WARNING, f"Cannot stat {artifact}, treating as expired: {e}")
            return True
        return (time.time() if now is None else now) >= mtime

    def has_expiry(self, artifact: Path) -> bool:
        try:
            return artifact.stat().st_mtime < NEVER_EXPIRES
        except OSError:
            return False

    def discard(self, artifact: Path) -> None:
        return None
