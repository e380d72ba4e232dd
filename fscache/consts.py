from pathlib import Path

DEFAULT_CACHE_DIR = (Path.home() / ".cache" / "fscache").absolute()

# Shard layout
SHARD_DEPTH = 4  # One single-character directory per level

# Owner rwx, group r-x, no world access
DIRECTORY_MODE = 0o750

# Companion file suffixes
TTL_SUFFIX = ".ttl"  # Sidecar holding the absolute expiry timestamp
LOCK_SUFFIX = ".lock"  # Writer lock for a single artifact
TEMP_PREFIX = ".tmp-"  # In-flight writes, published with os.replace

# Writers wait this long for the per-artifact lock before giving up
LOCK_TIMEOUT = 10.0  # seconds

# mtime given to artifacts without a TTL under the modification-time strategy
NEVER_EXPIRES = 253402300799.0  # 9999-12-31T23:59:59Z
