"""Filesystem operations on cached artifacts.

ArtifactStore knows nothing about keys or expiry. It creates shard
directories, writes artifacts under an exclusive per-file lock, reads and
removes them, and clears whole subtrees.
"""

import contextlib
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from filelock import FileLock, Timeout

from fscache.consts import DIRECTORY_MODE, LOCK_SUFFIX, LOCK_TIMEOUT, TTL_SUFFIX
from fscache.diagnostics import report
from fscache.storage.atomic import is_staging_file, write_bytes_atomic
from fscache.storage.paths import lock_path

logger = logging.getLogger(__name__)


def is_blank(data: bytes) -> bool:
    """Check whether a payload is empty or whitespace-only."""
    return not data.strip()


def is_artifact_file(path: Path) -> bool:
    """Check whether a file in the tree is an artifact rather than a companion file."""
    return not (is_staging_file(path) or path.name.endswith((TTL_SUFFIX, LOCK_SUFFIX)))


class ArtifactStore:
    """Reads, writes and removes artifact files.

    Writers serialize on ``<artifact>.lock`` and publish with an atomic
    rename, so readers see either the previous content or the new content.
    Lock files are left in place; removing them while another process waits
    on them would break mutual exclusion.
    """

    def __init__(self, lock_timeout: float = LOCK_TIMEOUT, log: logging.Logger | None = None):
        """Initialize ArtifactStore.

        Args:
            lock_timeout: Seconds a writer waits for the artifact lock.
            log: Diagnostics sink. Defaults to the module logger.
        """
        self.lock_timeout = lock_timeout
        self.logger = log or logger

    def ensure_directory(self, path: Path) -> None:
        """Create path and any missing parents with DIRECTORY_MODE.

        Raises:
            OSError: If a directory cannot be created.
        """
        missing = []
        current = path
        while not current.is_dir():
            missing.append(current)
            if current.parent == current:
                break
            current = current.parent
        for directory in reversed(missing):
            directory.mkdir(mode=DIRECTORY_MODE, exist_ok=True)

    def write(
        self,
        path: Path,
        data: bytes,
        before_publish: Callable[[Path], None] | None = None,
        after_publish: Callable[[Path], None] | None = None,
        on_failure: Callable[[Path], None] | None = None,
    ) -> bool:
        """Write an artifact atomically under an exclusive lock.

        Args:
            path: Artifact path.
            data: Payload. Empty or whitespace-only payloads are not stored.
            before_publish: Called with the temp file path once the content is
                on disk, before it replaces ``path``.
            after_publish: Called with ``path`` once the new content replaced it.
            on_failure: Called with ``path`` if writing or either hook fails,
                while the lock is still held. Not called when the lock could
                not be acquired, since another writer owns ``path`` then.

        Returns:
            True if the artifact was published, False otherwise.
        """
        if is_blank(data):
            report(self.logger, logging.INFO, f"Empty payload for {path}, not stored")
            return False

        try:
            self.ensure_directory(path.parent)
            with FileLock(str(lock_path(path)), timeout=self.lock_timeout):
                try:
                    write_bytes_atomic(path, data, before_publish)
                    if after_publish is not None:
                        after_publish(path)
                except OSError:
                    if on_failure is not None:
                        on_failure(path)
                    raise
        except Timeout:
            report(self.logger, logging.ERROR, f"Timed out waiting for write lock on {path}")
            return False
        except OSError as e:
            report(self.logger, logging.ERROR, f"Failed to write {path}: {e}")
            return False

        report(self.logger, logging.DEBUG, f"Wrote {len(data)} bytes to {path}")
        return True

    def read(self, path: Path) -> bytes | None:
        """Read an artifact.

        Returns:
            Artifact content, or None if it is missing or unreadable.
        """
        try:
            return path.read_bytes()
        except FileNotFoundError:
            report(self.logger, logging.DEBUG, f"Artifact not found: {path}")
            return None
        except OSError as e:
            report(self.logger, logging.ERROR, f"Failed to read {path}: {e}")
            return None

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def remove(self, path: Path) -> bool:
        """Remove a file.

        Returns:
            True if the file was removed or did not exist, False on I/O error.
        """
        try:
            path.unlink()
        except FileNotFoundError:
            report(self.logger, logging.DEBUG, f"Nothing to remove at {path}")
            return True
        except OSError as e:
            report(self.logger, logging.ERROR, f"Failed to remove {path}: {e}")
            return False

        report(self.logger, logging.DEBUG, f"Removed {path}")
        return True

    def clear(self, root: Path) -> bool:
        """Delete every file and directory below root, keeping root itself.

        Traversal is depth-first with an explicit stack. The first failure
        stops the walk; whatever was deleted before it stays deleted.

        Returns:
            True if the subtree is now empty, False on the first failure.
        """
        if not root.is_dir():
            report(self.logger, logging.DEBUG, f"Nothing to clear at {root}")
            return True

        # (directory, children already pushed)
        stack: list[tuple[Path, bool]] = [(root, False)]
        try:
            while stack:
                directory, expanded = stack.pop()
                if expanded:
                    if directory != root:
                        with contextlib.suppress(FileNotFoundError):
                            directory.rmdir()
                    continue

                try:
                    entries = list(directory.iterdir())
                except FileNotFoundError:
                    continue
                stack.append((directory, True))
                for entry in entries:
                    if entry.is_dir() and not entry.is_symlink():
                        stack.append((entry, False))
                    else:
                        # A concurrent writer may have renamed or removed it
                        entry.unlink(missing_ok=True)
        except OSError as e:
            report(self.logger, logging.ERROR, f"Failed to clear {root}: {e}")
            return False

        report(self.logger, logging.INFO, f"Cleared {root}")
        return True

    def iter_artifacts(self, root: Path) -> Iterator[Path]:
        """Yield artifact files below root, skipping companion and temp files."""
        stack = [root]
        while stack:
            directory = stack.pop()
            try:
                entries = sorted(directory.iterdir())
            except OSError as e:
                report(self.logger, logging.WARNING, f"Cannot list {directory}: {e}")
                continue
            for entry in entries:
                if entry.is_dir() and not entry.is_symlink():
                    stack.append(entry)
                elif is_artifact_file(entry):
                    yield entry
