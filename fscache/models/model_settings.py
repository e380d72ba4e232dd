"""Configuration models for a filesystem cache instance."""

from datetime import timedelta
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fscache.consts import DEFAULT_CACHE_DIR, LOCK_TIMEOUT


class CacheFormat(str, Enum):
    """Cosmetic file-extension tags for stored artifacts.

    The tag only changes the artifact filename, never the stored bytes.
    """

    NONE = "none"
    JSON = "json"
    XML = "xml"
    TXT = "txt"
    HTML = "html"
    PNG = "png"
    JPG = "jpg"

    @property
    def suffix(self) -> str:
        """Filename suffix including the leading dot, or empty string."""
        if self is CacheFormat.NONE:
            return ""
        return f".{self.value}"


class ExpirationStrategy(str, Enum):
    """Where an entry's expiry is recorded."""

    SIDECAR = "sidecar"  # <artifact>.ttl holding the expiry timestamp
    MTIME = "mtime"  # The artifact's own modification time


class ShardLayout(str, Enum):
    """How keys are mapped onto shard directories."""

    HASHED = "hashed"  # Shards and filename from the SHA-256 digest of the key
    LEGACY = "legacy"  # Shards from the first key characters, filename is the key


class CacheSettings(BaseModel):
    """Immutable configuration for a FileSystemCache.

    base_path is stored as given; the cache resolves and creates it when the
    settings are applied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_path: Path = Field(default=DEFAULT_CACHE_DIR, description="Root directory of the cache")
    default_ttl: float | None = Field(
        default=None, description="Store-wide TTL in seconds. None means entries never expire"
    )
    format: CacheFormat = Field(default=CacheFormat.NONE, description="Artifact filename suffix")
    expiration: ExpirationStrategy = Field(default=ExpirationStrategy.SIDECAR)
    layout: ShardLayout = Field(default=ShardLayout.HASHED)
    lock_timeout: float = Field(
        default=LOCK_TIMEOUT, gt=0, description="Seconds a writer waits for the artifact lock"
    )

    @field_validator("base_path", mode="before")
    @classmethod
    def _non_empty_path(cls, value: object) -> object:
        if not str(value).strip():
            raise ValueError("empty path")
        return value

    @field_validator("default_ttl", mode="before")
    @classmethod
    def _ttl_to_seconds(cls, value: object) -> object:
        if isinstance(value, timedelta):
            return value.total_seconds()
        return value
