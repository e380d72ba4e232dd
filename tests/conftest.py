"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from fscache.models.model_settings import CacheFormat, ExpirationStrategy
from fscache.storage.cache.file_caching import FileSystemCache


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def file_cache(temp_dir: Path) -> FileSystemCache:
    """Create a FileSystemCache with no default TTL."""
    return FileSystemCache(base_path=temp_dir)


@pytest.fixture(params=[ExpirationStrategy.SIDECAR, ExpirationStrategy.MTIME], ids=["sidecar", "mtime"])
def any_strategy_cache(request, temp_dir: Path) -> FileSystemCache:
    """FileSystemCache parametrized over both expiration strategies."""
    return FileSystemCache(base_path=temp_dir, cache_format=CacheFormat.TXT, expiration=request.param)
