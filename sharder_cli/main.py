"""Command-line interface for sharding a folder of files."""
# Example:
# python -m sharder_cli.main --source notes --target sharded --mode content --shard-len 4

from __future__ import annotations

import sys
from argparse import ArgumentParser, RawDescriptionHelpFormatter
from pathlib import Path

from sharder import __version__
from sharder.config import DEFAULT_EXTENSION, DEFAULT_SHARD_LEN, ShardMode, build_config
from sharder.errors import SharderError
from sharder.executor import run
from sharder.logging_config import configure_logging


def build_parser() -> ArgumentParser:
    """Create the argument parser for the ``sharder`` command.

    Values left unset on the command line stay ``None`` so that config file
    and environment settings can fill them in.

    Returns:
        ArgumentParser: Configured parser.
    """
    parser = ArgumentParser(
        prog="sharder",
        description="Shard a flat folder of files into a sharded directory structure.\n\n"
                    "Only files matching the file type are copied, each to "
                    "<target>/<prefix>/<file name>, where <prefix> is the lowercased start of\n"
                    "the file name or of its SHA-256 content hash. .gitignore/.ignore files and "
                    "hidden files are respected.",
        formatter_class=RawDescriptionHelpFormatter,
    )
    parser.add_argument("-s", "--source", required=True, type=Path, help="Source folder with files")
    parser.add_argument(
        "-t", "--target", required=True, type=Path, help="Output folder where sharded files will be stored"
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=[m.value for m in ShardMode],
        default=None,
        help=f"Sharding strategy, by file name or file content hash (default: {ShardMode.FILENAME.value})",
    )
    parser.add_argument(
        "-f",
        "--file-type",
        default=None,
        help=f"Shard files with matching file extension (default: {DEFAULT_EXTENSION})",
    )
    parser.add_argument(
        "--shard-len",
        type=int,
        default=None,
        help=f"Number of characters used for sharding (default: {DEFAULT_SHARD_LEN})",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Depth of folders to recursively walk. By default walk all sub trees.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: ./sharder.yaml when present)",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for sharding a folder.

    Args:
        argv: Optional list of arguments (defaults to ``sys.argv``).

    Returns:
        int: Process exit code (0 on success, 1 if the run could not start
        or was aborted).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    log = configure_logging(args.log_level)

    try:
        config = build_config(
            args.source,
            args.target,
            config_file=args.config,
            overrides={
                "mode": args.mode,
                "extension": args.file_type,
                "shard_len": args.shard_len,
                "depth": args.depth,
            },
        )
        report = run(config, on_written=lambda path: print(f"Wrote {path}", flush=True))
    except SharderError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    if not report.ok:
        log.warning(
            "%d file(s) could not be sharded and %d walk error(s) occurred; see messages above",
            len(report.failed),
            report.walk_errors,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
