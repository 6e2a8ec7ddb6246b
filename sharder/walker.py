"""Recursive directory walk feeding the sharder.

The walk is depth-first and visits the entries of every directory in lexical
order of their names, so two runs over the same tree see files in the same
order. Hidden entries are skipped and ``.gitignore`` / ``.ignore`` files are
honored at every level, with patterns relative to the directory holding the
ignore file. Symlinked directories are not descended.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

import pathspec

from .errors import SourceRootError
from .logging_config import log

IGNORE_FILES: Tuple[str, ...] = (".gitignore", ".ignore")

_Rules = List[Tuple[Path, pathspec.PathSpec]]


@dataclass(frozen=True)
class WalkEntry:
    """One step of the walk.

    ``error`` is set when the step itself failed (e.g. a directory could not
    be listed); such entries carry the path that failed and ``is_file=False``.
    """

    path: Path
    is_file: bool
    depth: int
    error: OSError | None = None


def walk(
    root: Path | str,
    max_depth: int | None = None,
    ignore_files: Sequence[str] = IGNORE_FILES,
) -> Iterator[WalkEntry]:
    """Walk ``root`` and yield its entries (the root itself is not yielded).

    Args:
        root: Directory to walk.
        max_depth: Deepest level to yield; the root's children are depth 1.
            ``None`` walks the whole tree, ``0`` yields nothing.
        ignore_files: Names of gitignore-style files to honor.

    Returns:
        Iterator[WalkEntry]: Entries in deterministic order.

    Raises:
        SourceRootError: If ``root`` is missing or not a directory. Raised
            before the first entry is produced.
    """
    root = Path(root)
    if not root.exists():
        raise SourceRootError(f"Source root {root} does not exist")
    if not root.is_dir():
        raise SourceRootError(f"Source root {root} is not a directory")
    return _walk_dir(root, 1, _load_rules(root, [], ignore_files), max_depth, ignore_files)


def _walk_dir(
    directory: Path,
    depth: int,
    rules: _Rules,
    max_depth: int | None,
    ignore_files: Sequence[str],
) -> Iterator[WalkEntry]:
    if max_depth is not None and depth > max_depth:
        return

    try:
        with os.scandir(directory) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        yield WalkEntry(path=directory, is_file=False, depth=depth - 1, error=exc)
        return

    for child in children:
        if child.name.startswith("."):
            continue
        path = Path(child.path)
        try:
            is_dir = child.is_dir(follow_symlinks=False)
            is_file = child.is_file()
        except OSError as exc:
            yield WalkEntry(path=path, is_file=False, depth=depth, error=exc)
            continue

        if _is_ignored(rules, path, is_dir):
            log.debug("Ignoring %s", path)
            continue

        yield WalkEntry(path=path, is_file=is_file, depth=depth)
        if is_dir:
            yield from _walk_dir(
                path,
                depth + 1,
                _load_rules(path, rules, ignore_files),
                max_depth,
                ignore_files,
            )


def _load_rules(directory: Path, inherited: _Rules, ignore_files: Sequence[str]) -> _Rules:
    """Return ``inherited`` extended by the ignore files found in ``directory``."""
    rules = list(inherited)
    for name in ignore_files:
        candidate = directory / name
        if not candidate.is_file():
            continue
        try:
            with candidate.open("r", encoding="utf-8") as fh:
                spec = pathspec.GitIgnoreSpec.from_lines(fh)
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Failed to read ignore file %s: %s", candidate, exc)
            continue
        rules.append((directory, spec))
    return rules


def _is_ignored(rules: _Rules, path: Path, is_dir: bool) -> bool:
    for base, spec in rules:
        rel = path.relative_to(base).as_posix()
        if is_dir:
            # Directory-only patterns ("build/") need the trailing slash.
            rel += "/"
        if spec.match_file(rel):
            return True
    return False


__all__ = ["WalkEntry", "walk", "IGNORE_FILES"]
