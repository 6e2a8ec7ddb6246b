"""Shard a directory of files into ``<target>/<prefix>/<name>`` by file name or content hash."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "errors",
    "executor",
    "logging_config",
    "sharding",
    "walker",
]
