"""Atomic file replacement helpers."""

import os
import uuid
from collections.abc import Callable
from contextlib import suppress
from pathlib import Path

from fscache.consts import TEMP_PREFIX


def staging_path(path: Path) -> Path:
    """Unique temp path next to ``path``, on the same filesystem."""
    return path.with_name(f"{TEMP_PREFIX}{path.name}.{uuid.uuid4().hex}")


def is_staging_file(path: Path) -> bool:
    return path.name.startswith(TEMP_PREFIX)


def write_bytes_atomic(
    path: Path,
    data: bytes,
    before_publish: Callable[[Path], None] | None = None,
) -> None:
    """Write data to a temp file, then rename it over ``path``.

    The temp file is created with mode 0o666 so the process umask decides the
    final permissions. ``before_publish`` receives the temp path after the
    content is on disk and before the rename; if it raises, nothing is
    published.

    Raises:
        OSError: If any step fails. The temp file is removed first.
    """
    tmp = staging_path(path)
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        if before_publish is not None:
            before_publish(tmp)
        os.replace(tmp, path)
    except BaseException:
        with suppress(FileNotFoundError):
            tmp.unlink()
        raise
