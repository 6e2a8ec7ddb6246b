"""Run configuration for sharder.

Settings are layered: an optional YAML file, then ``SHARDER_*`` environment
variables, then explicit command-line values. The result is frozen into a
:class:`ShardConfig` that stays unchanged for the whole run.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .errors import ConfigError
from .logging_config import log

DEFAULT_CONFIG_FILE = Path("sharder.yaml")
DEFAULT_EXTENSION = "md"
DEFAULT_SHARD_LEN = 2

_ENV_KEYS = {
    "mode": "SHARDER_MODE",
    "extension": "SHARDER_EXTENSION",
    "shard_len": "SHARDER_SHARD_LEN",
    "depth": "SHARDER_DEPTH",
}


class ShardMode(enum.Enum):
    """Where the shard key comes from."""

    FILENAME = "filename"
    CONTENT = "content"

    @classmethod
    def parse(cls, value: "ShardMode | str") -> "ShardMode":
        """Resolve a mode from its name, case-insensitively.

        Args:
            value: A ``ShardMode`` or one of ``"filename"`` / ``"content"``.

        Returns:
            ShardMode: The matching member.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ConfigError(f"Unknown shard mode {value!r} (expected one of: {choices})") from None


@dataclass(frozen=True)
class ShardConfig:
    """Immutable settings for a single sharding run."""

    source: Path
    target: Path
    mode: ShardMode = ShardMode.FILENAME
    extension: str = DEFAULT_EXTENSION
    shard_len: int = DEFAULT_SHARD_LEN
    max_depth: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", Path(self.source))
        object.__setattr__(self, "target", Path(self.target))
        object.__setattr__(self, "mode", ShardMode.parse(self.mode))

        extension = str(self.extension).lstrip(".")
        if not extension:
            raise ConfigError("File extension must not be empty")
        object.__setattr__(self, "extension", extension)

        if self.shard_len < 0:
            raise ConfigError(f"shard_len must be >= 0, got {self.shard_len}")
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigError(f"depth must be >= 0, got {self.max_depth}")


def load_config_file(path: Path | None = None) -> Dict[str, Any]:
    """Read settings from a YAML file.

    Without an explicit ``path`` the default ``sharder.yaml`` in the working
    directory is used when present. An explicitly requested file that cannot
    be read is an error; a file that does not hold a mapping is ignored.

    Args:
        path: Optional path to a YAML config file.

    Returns:
        dict: Settings found in the file (possibly empty).
    """
    explicit = path is not None
    path = Path(path) if explicit else DEFAULT_CONFIG_FILE

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file {path} does not exist")
        return {}

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config from {path}: {exc}") from exc

    if not isinstance(data, dict):
        log.warning("Config file %s does not contain a mapping", path)
        return {}

    # An empty or null value (``extension:``) leaves the setting unset.
    data = _without_unset(data)
    # ``file_type`` mirrors the command-line flag name.
    if "file_type" in data and "extension" not in data:
        data["extension"] = data.pop("file_type")
    return data


def _without_unset(settings: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in settings.items() if v is not None}


def env_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Collect ``SHARDER_*`` environment overrides.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        dict: Setting name to raw string value for every variable that is set.
    """
    environ = os.environ if environ is None else environ
    overrides = {}
    for key, var in _ENV_KEYS.items():
        value = environ.get(var)
        if value:
            overrides[key] = value
    return overrides


def _as_int(key: str, value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None


def build_config(
    source: Path | str,
    target: Path | str,
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ShardConfig:
    """Merge file, environment and explicit settings into a ``ShardConfig``.

    Args:
        source: Source root to walk.
        target: Target root receiving the shards.
        config_file: Optional YAML file; see :func:`load_config_file`.
        overrides: Explicit settings (usually from the command line). Keys
            whose value is ``None`` are treated as unset.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        ShardConfig: Validated, immutable configuration.
    """
    cfg: Dict[str, Any] = {}
    cfg.update(load_config_file(config_file))
    cfg.update(env_overrides(environ))
    cfg.update(_without_unset(overrides or {}))

    unknown = sorted(set(cfg) - set(_ENV_KEYS))
    if unknown:
        log.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    shard_len = _as_int("shard_len", cfg.get("shard_len"))
    config = ShardConfig(
        source=Path(source),
        target=Path(target),
        mode=cfg.get("mode", ShardMode.FILENAME),
        extension=cfg.get("extension", DEFAULT_EXTENSION),
        shard_len=DEFAULT_SHARD_LEN if shard_len is None else shard_len,
        max_depth=_as_int("depth", cfg.get("depth")),
    )
    log.info(
        "Configuration loaded: source=%s target=%s mode=%s extension=%s shard_len=%s depth=%s",
        config.source,
        config.target,
        config.mode.value,
        config.extension,
        config.shard_len,
        "unlimited" if config.max_depth is None else config.max_depth,
    )
    return config
