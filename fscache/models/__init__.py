"""Pydantic models for fscache."""

from fscache.models.model_settings import (
    CacheFormat,
    CacheSettings,
    ExpirationStrategy,
    ShardLayout,
)
from fscache.models.model_stats import CacheStats

__all__ = [
    # Settings models
    "CacheFormat",
    "CacheSettings",
    "ExpirationStrategy",
    "ShardLayout",
    # Statistics models
    "CacheStats",
]
