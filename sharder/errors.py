"""Error types for sharder."""


class SharderError(Exception):
    """Base exception for sharder errors."""
    pass


class ConfigError(SharderError):
    """Invalid or unreadable run configuration."""
    pass


class SourceRootError(SharderError):
    """The source root cannot be walked (missing or not a directory)."""
    pass


class ShardDirectoryError(SharderError):
    """A shard directory under the target root could not be created."""
    pass
