"""Sharding decisions: which files qualify and which shard they land in.

Everything here is pure; the executor does the I/O. A shard prefix is the
lowercased head of the shard key, ``shard_len`` characters long (Unicode code
points, not bytes), or the whole key when it is shorter.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path, PurePath
from typing import Iterable, Iterator

from .config import ShardMode
from .walker import WalkEntry


def matches_extension(path: PurePath, extension: str) -> bool:
    """Return True if ``path`` carries exactly ``extension`` (case-sensitive).

    Args:
        path: File path to test.
        extension: Extension without a leading dot, e.g. ``md``.

    Returns:
        bool: Whether the final suffix equals ``extension``.
    """
    suffix = path.suffix
    return bool(suffix) and suffix[1:] == extension


def filter_entries(entries: Iterable[WalkEntry], extension: str) -> Iterator[WalkEntry]:
    """Yield the file entries whose extension matches.

    Directories, failed walk entries and non-matching files are dropped
    silently.

    Args:
        entries: Walk entries in traversal order.
        extension: Extension without a leading dot.

    Returns:
        Iterator[WalkEntry]: Matching file entries, order preserved.
    """
    for entry in entries:
        if entry.error is None and entry.is_file and matches_extension(entry.path, extension):
            yield entry


def hex_sha256(data: bytes) -> str:
    """Lowercase hex SHA-256 digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def shard_key(file_name: str, content: bytes | None, mode: ShardMode) -> str:
    """Compute the shard key for a file.

    Args:
        file_name: Base name of the file, used verbatim in filename mode.
        content: Full file bytes; required in content mode.
        mode: Selected sharding mode.

    Returns:
        str: The base name, or the 64-char hex SHA-256 of ``content``.
    """
    if mode is ShardMode.FILENAME:
        return file_name
    if content is None:
        raise ValueError("content is required to compute a content shard key")
    return hex_sha256(content)


def shard_prefix(key: str, shard_len: int) -> str:
    """Return the lowercased first ``shard_len`` characters of ``key``.

    Examples:
        shard_prefix("notes.md", 2) -> "no"
        shard_prefix("a", 4) -> "a"
        shard_prefix("Notes.md", 0) -> ""

    Args:
        key: Shard key.
        shard_len: Number of characters to keep; ``0`` gives an empty prefix.

    Returns:
        str: Shard directory name.
    """
    if shard_len < 0:
        raise ValueError(f"shard_len must be >= 0, got {shard_len}")
    return key[: min(shard_len, len(key))].lower()


def is_safe_segment(segment: str) -> bool:
    """Return True if ``segment`` names an entry inside its parent directory.

    ``"."``, ``".."`` and anything holding a path separator do not name a
    single entry below the parent and could escape the target root. The empty string is allowed; it is the
    prefix for ``shard_len == 0``.
    """
    if segment in (".", ".."):
        return False
    separators = {sep for sep in (os.sep, os.altsep, "/") if sep}
    return not any(sep in segment for sep in separators) and "\0" not in segment


def destination_for(target: Path, prefix: str, file_name: str) -> Path:
    """Build ``target/<prefix>/<file_name>``; an empty prefix means ``target/<file_name>``."""
    shard_dir = target / prefix if prefix else target
    return shard_dir / file_name


__all__ = [
    "matches_extension",
    "filter_entries",
    "hex_sha256",
    "shard_key",
    "shard_prefix",
    "is_safe_segment",
    "destination_for",
]
