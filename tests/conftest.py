"""Test configuration that ensures project modules are importable."""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so `sharder` and `sharder_cli` can be imported in tests.
ROOT = Path(__file__).resolve().parent.parent
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


@pytest.fixture
def make_tree(tmp_path):
    """Return a helper that writes ``{relative path: bytes}`` under a source root.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Callable: ``make_tree(files) -> Path`` creating the files and returning the root.
    """
    def _make(files, root_name="src"):
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for rel, data in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(data, str):
                data = data.encode("utf-8")
            path.write_bytes(data)
        return root

    return _make


@pytest.fixture(autouse=True)
def reset_sharder_logger():
    """Drop console handlers a test attached so they do not outlive its captured streams.

    Returns:
        None
    """
    logger = logging.getLogger("sharder")
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(level)
