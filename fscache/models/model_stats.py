"""Statistics models describing the contents of a cache tree."""

from datetime import datetime

from pydantic import BaseModel, Field

from fscache.models.common import _utc_now


class CacheStats(BaseModel):
    """Snapshot of a cache tree, computed by walking the base path.

    Expired entries are still on disk until overwritten, deleted or cleared,
    so they count towards total_entries and total_bytes.
    """

    computed_at: datetime = Field(default_factory=_utc_now)
    base_path: str
    total_entries: int = Field(ge=0, description="Artifacts on disk")
    expired_entries: int = Field(ge=0, description="Artifacts hidden from reads")
    total_bytes: int = Field(ge=0, description="Combined artifact size")

    @property
    def valid_entries(self) -> int:
        return self.total_entries - self.expired_entries
