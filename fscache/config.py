"""Building and validating cache configuration."""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fscache.consts import DIRECTORY_MODE
from fscache.diagnostics import report
from fscache.exceptions import ConfigurationError
from fscache.models.model_settings import CacheSettings

logger = logging.getLogger(__name__)


def build_settings(**values: Any) -> CacheSettings:
    """Create CacheSettings, turning validation errors into ConfigurationError."""
    try:
        return CacheSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"invalid cache configuration: {e}") from e


def resolve_base_path(base_path: Path | str, log: logging.Logger | None = None) -> Path:
    """Create the cache root if missing and return its canonical absolute path.

    Raises:
        ConfigurationError: If the path is empty, cannot be created, or does
            not resolve to a directory.
    """
    log = log or logger
    if not str(base_path).strip():
        raise ConfigurationError("empty path")

    path = Path(base_path).expanduser()
    if not path.exists():
        report(log, logging.INFO, f"Creating missing cache directory: {path}")
        try:
            path.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
        except OSError as e:
            report(log, logging.ERROR, f"Error while creating cache directory {path}: {e}")
            raise ConfigurationError(f"cannot create cache directory: {path}") from e

    try:
        resolved = path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise ConfigurationError(f"invalid path: {path}") from e

    if not resolved.is_dir():
        raise ConfigurationError(f"cache path is not a directory: {resolved}")
    return resolved
