"""Exception hierarchy for fscache.

Only caller mistakes surface as exceptions. Storage failures during data
operations are logged and reported through return values instead.
"""


class CacheError(Exception):
    """Base class for all fscache errors."""


class InvalidKeyError(CacheError, ValueError):
    """Raised when a cache key is empty or cannot be mapped to a path."""


class ConfigurationError(CacheError, ValueError):
    """Raised when cache settings are invalid or the base path cannot be created or resolved."""
