"""Tests for key to path mapping."""

import hashlib
from pathlib import Path

import pytest

from fscache.exceptions import InvalidKeyError
from fscache.models.model_settings import CacheFormat, ShardLayout
from fscache.storage.paths import ShardPathMapper, hash_key


@pytest.fixture
def base() -> Path:
    return Path("/var/cache/app")


class TestHashedLayout:
    """Tests for the default digest-based layout."""

    def test_shards_come_from_digest(self, base: Path) -> None:
        """Test that the four shard directories are the first digest characters."""
        mapper = ShardPathMapper(base)
        digest = hashlib.sha256(b"abcdef123").hexdigest()

        assert mapper.directory_path("abcdef123") == base / digest[0] / digest[1] / digest[2] / digest[3]
        assert mapper.file_path("abcdef123") == mapper.directory_path("abcdef123") / digest

    def test_format_suffix(self, base: Path) -> None:
        """Test that the format tag only adds a filename suffix."""
        mapper = ShardPathMapper(base, CacheFormat.JSON)
        path = mapper.file_path("key")
        assert path.name == f"{hash_key('key')}.json"

    def test_short_keys_get_full_depth(self, base: Path) -> None:
        """Test that one-character keys still map to four shard levels."""
        mapper = ShardPathMapper(base)
        relative = mapper.file_path("a").relative_to(base)
        assert len(relative.parts) == 5
        assert all(len(part) == 1 for part in relative.parts[:4])

    def test_multibyte_and_separator_keys_stay_under_base(self, base: Path) -> None:
        """Test that unusual keys never escape the base directory."""
        mapper = ShardPathMapper(base)
        for key in ["ñandú", "../../etc/passwd", "a/b/c", "..", "key with spaces"]:
            path = mapper.file_path(key)
            assert path.is_relative_to(base)
            assert len(path.relative_to(base).parts) == 5

    def test_deterministic(self, base: Path) -> None:
        """Test that the same key always maps to the same path."""
        assert ShardPathMapper(base).file_path("k") == ShardPathMapper(base).file_path("k")

    def test_distinct_keys_distinct_paths(self, base: Path) -> None:
        """Test that different keys do not collide."""
        mapper = ShardPathMapper(base)
        paths = {mapper.file_path(f"key-{i}") for i in range(200)}
        assert len(paths) == 200

    def test_companion_paths(self, base: Path) -> None:
        """Test sidecar and lock paths sit next to the artifact."""
        mapper = ShardPathMapper(base, CacheFormat.TXT)
        artifact = mapper.file_path("key")
        assert mapper.ttl_path("key") == artifact.with_name(artifact.name + ".ttl")
        assert mapper.lock_path("key") == artifact.with_name(artifact.name + ".lock")

    def test_no_filesystem_access(self, tmp_path: Path) -> None:
        """Test that mapping does not create anything on disk."""
        mapper = ShardPathMapper(tmp_path / "missing")
        mapper.file_path("abcdef")
        assert not (tmp_path / "missing").exists()


class TestLegacyLayout:
    """Tests for the character-based layout compatible with older trees."""

    def test_concrete_layout(self, base: Path) -> None:
        """Test the documented on-disk layout."""
        mapper = ShardPathMapper(base, CacheFormat.TXT, ShardLayout.LEGACY)
        assert mapper.file_path("abcdef123") == base / "a" / "b" / "c" / "d" / "abcdef123.txt"
        assert mapper.ttl_path("abcdef123") == base / "a" / "b" / "c" / "d" / "abcdef123.txt.ttl"

    def test_no_format(self, base: Path) -> None:
        """Test that CacheFormat.NONE adds no suffix."""
        mapper = ShardPathMapper(base, layout=ShardLayout.LEGACY)
        assert mapper.file_path("abcd") == base / "a" / "b" / "c" / "d" / "abcd"

    def test_short_key_segments_collapse(self, base: Path) -> None:
        """Test that missing characters produce empty shard segments."""
        mapper = ShardPathMapper(base, layout=ShardLayout.LEGACY)
        assert mapper.shards("ab") == ["a", "b", "", ""]
        assert mapper.file_path("ab") == base / "a" / "b" / "ab"

    def test_multibyte_characters(self, base: Path) -> None:
        """Test that shards are taken per character, not per byte."""
        mapper = ShardPathMapper(base, layout=ShardLayout.LEGACY)
        assert mapper.shards("ñandú") == ["ñ", "a", "n", "d"]

    @pytest.mark.parametrize("key", ["a/b", "..", ".", "nul\0byte", "abcd.ttl", "abcd.lock", ".tmp-abcd.0123"])
    def test_unmappable_keys_rejected(self, base: Path, key: str) -> None:
        """Test that keys escaping the base directory or naming companion files are rejected."""
        mapper = ShardPathMapper(base, layout=ShardLayout.LEGACY)
        with pytest.raises(InvalidKeyError):
            mapper.file_path(key)
