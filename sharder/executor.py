"""Copy qualifying files from the source tree into their shard directories.

Each file is handled on its own: read and write failures are logged and
recorded as a failed :class:`Relocation`, and the run moves on. Failing to
create a shard directory is systemic and aborts the run with
:class:`~sharder.errors.ShardDirectoryError`. Files with the same name that
land in the same shard overwrite each other; the last one walked wins.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List

from .config import ShardConfig, ShardMode
from .errors import ShardDirectoryError
from .logging_config import log
from .sharding import destination_for, filter_entries, is_safe_segment, shard_key, shard_prefix
from .walker import WalkEntry, walk


class RelocationStatus(enum.Enum):
    WRITTEN = "written"
    MISSING_NAME = "missing_name"
    UNSAFE_PATH = "unsafe_path"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"


@dataclass
class Relocation:
    """Outcome of sharding a single file."""

    source: Path
    status: RelocationStatus
    destination: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is RelocationStatus.WRITTEN


@dataclass
class RunReport:
    """Summary of a run."""

    written: List[Relocation] = field(default_factory=list)
    failed: List[Relocation] = field(default_factory=list)
    walk_errors: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed and not self.walk_errors


def ensure_shard_dir(shard_dir: Path) -> None:
    """Create ``shard_dir`` and its parents; an existing directory is fine.

    Raises:
        ShardDirectoryError: If the directory cannot be created.
    """
    try:
        shard_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ShardDirectoryError(f"Cannot create shard directory {shard_dir}: {exc}") from exc


def relocate(source: Path, config: ShardConfig) -> Relocation:
    """Copy one file into its shard under ``config.target``.

    Args:
        source: File to copy.
        config: Run configuration.

    Returns:
        Relocation: ``WRITTEN`` with the destination path, or a failed
        outcome describing what went wrong.

    Raises:
        ShardDirectoryError: If the shard directory cannot be created.
    """
    file_name = source.name
    if not file_name:
        return Relocation(source, RelocationStatus.MISSING_NAME, error="path has no file name")
    if not is_safe_segment(file_name):
        return Relocation(source, RelocationStatus.UNSAFE_PATH, error=f"unusable file name {file_name!r}")

    try:
        content = source.read_bytes()
    except OSError as exc:
        return Relocation(source, RelocationStatus.READ_FAILED, error=str(exc))

    key = shard_key(file_name, content, config.mode)
    prefix = shard_prefix(key, config.shard_len)
    if not is_safe_segment(prefix):
        return Relocation(
            source, RelocationStatus.UNSAFE_PATH, error=f"shard prefix {prefix!r} is not a directory name"
        )
    destination = destination_for(config.target, prefix, file_name)
    ensure_shard_dir(destination.parent)

    try:
        destination.write_bytes(content)
    except OSError as exc:
        return Relocation(source, RelocationStatus.WRITE_FAILED, destination, str(exc))

    return Relocation(source, RelocationStatus.WRITTEN, destination)


def shard_entries(
    entries: Iterable[WalkEntry],
    config: ShardConfig,
    on_written: Callable[[Path], None] | None = None,
) -> RunReport:
    """Drive the per-file pipeline over already walked entries.

    Args:
        entries: Walk entries in traversal order.
        config: Run configuration.
        on_written: Called with each destination path after a successful write.

    Returns:
        RunReport: What was written, what failed, and how much was skipped.
    """
    report = RunReport()
    source = config.source.resolve()
    target = config.target.resolve()
    nested_target = target if target != source and _is_within(target, source) else None
    files_seen = 0

    def _candidates() -> Iterable[WalkEntry]:
        nonlocal files_seen
        for entry in entries:
            if entry.error is not None:
                report.walk_errors += 1
                log.warning("Error walking %s: %s", entry.path, entry.error)
                continue
            # A target nested in the source must not be fed back into the run.
            if nested_target is not None and _is_within(entry.path, nested_target):
                continue
            if entry.is_file:
                files_seen += 1
            yield entry

    for entry in filter_entries(_candidates(), config.extension):
        outcome = relocate(entry.path, config)
        if outcome.ok:
            report.written.append(outcome)
            log.debug("Wrote %s -> %s", outcome.source, outcome.destination)
            if on_written is not None:
                on_written(outcome.destination)
        else:
            report.failed.append(outcome)
            log.error("Failed to shard %s (%s): %s", outcome.source, outcome.status.value, outcome.error)

    report.skipped = files_seen - len(report.written) - len(report.failed)
    return report


def _is_within(path: Path, directory: Path) -> bool:
    try:
        (path.parent.resolve() / path.name).relative_to(directory)
    except ValueError:
        return False
    return True


def run(config: ShardConfig, on_written: Callable[[Path], None] | None = None) -> RunReport:
    """Walk ``config.source`` and shard every matching file into ``config.target``.

    Raises:
        SourceRootError: If the source root cannot be walked.
        ShardDirectoryError: If a shard directory cannot be created.
    """
    entries = walk(config.source, max_depth=config.max_depth)
    log.info(
        "Sharding *.%s files from %s into %s by %s",
        config.extension,
        config.source,
        config.target,
        "content hash" if config.mode is ShardMode.CONTENT else "file name",
    )
    report = shard_entries(entries, config, on_written=on_written)
    log.info(
        "Done: %d written, %d failed, %d skipped, %d walk errors",
        len(report.written),
        len(report.failed),
        report.skipped,
        report.walk_errors,
    )
    return report
