from pathlib import Path

import pytest

from sharder.config import ShardConfig, ShardMode, build_config, env_overrides, load_config_file
from sharder.errors import ConfigError


def test_defaults():
    config = ShardConfig("src", "out")
    assert config.source == Path("src")
    assert config.target == Path("out")
    assert config.mode is ShardMode.FILENAME
    assert config.extension == "md"
    assert config.shard_len == 2
    assert config.max_depth is None


def test_config_is_immutable():
    config = ShardConfig("src", "out")
    with pytest.raises(AttributeError):
        config.shard_len = 4


def test_extension_leading_dot_is_stripped():
    assert ShardConfig("src", "out", extension=".txt").extension == "txt"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"shard_len": -1},
        {"max_depth": -2},
        {"extension": ""},
        {"extension": "."},
        {"mode": "checksum"},
    ],
)
def test_invalid_settings_raise_config_error(kwargs):
    with pytest.raises(ConfigError):
        ShardConfig("src", "out", **kwargs)


def test_mode_parse_is_case_insensitive():
    assert ShardMode.parse("Content") is ShardMode.CONTENT
    assert ShardMode.parse(ShardMode.FILENAME) is ShardMode.FILENAME


def test_load_config_file_reads_mapping(tmp_path):
    path = tmp_path / "sharder.yaml"
    path.write_text("mode: content\nfile_type: txt\nshard_len: 4\n", encoding="utf-8")

    assert load_config_file(path) == {"mode": "content", "extension": "txt", "shard_len": 4}


def test_load_config_file_ignores_non_mapping(tmp_path):
    path = tmp_path / "sharder.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    assert load_config_file(path) == {}


def test_load_config_file_missing_explicit_path_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config_file(tmp_path / "nope.yaml")


def test_load_config_file_uses_default_file_in_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config_file() == {}

    (tmp_path / "sharder.yaml").write_text("depth: 3\n", encoding="utf-8")
    assert load_config_file() == {"depth": 3}


def test_env_overrides_only_reports_set_variables():
    environ = {"SHARDER_MODE": "content", "SHARDER_DEPTH": "", "OTHER": "x"}
    assert env_overrides(environ) == {"mode": "content"}


def test_build_config_layers_file_env_and_explicit(tmp_path):
    path = tmp_path / "sharder.yaml"
    path.write_text("mode: content\nshard_len: 4\nextension: txt\ndepth: 1\n", encoding="utf-8")
    environ = {"SHARDER_SHARD_LEN": "6", "SHARDER_EXTENSION": "rst"}

    config = build_config(
        "src",
        "out",
        config_file=path,
        overrides={"extension": "md", "depth": None},
        environ=environ,
    )

    assert config.mode is ShardMode.CONTENT
    assert config.shard_len == 6
    assert config.extension == "md"
    assert config.max_depth == 1


def test_build_config_rejects_non_integer_shard_len():
    with pytest.raises(ConfigError):
        build_config("src", "out", environ={"SHARDER_SHARD_LEN": "two"})


def test_null_values_in_config_file_fall_back_to_defaults(tmp_path):
    path = tmp_path / "sharder.yaml"
    path.write_text("extension:\nmode: null\nshard_len: 3\n", encoding="utf-8")

    assert load_config_file(path) == {"shard_len": 3}

    config = build_config("src", "out", config_file=path, environ={})
    assert config.extension == "md"
    assert config.mode is ShardMode.FILENAME
    assert config.shard_len == 3


def test_null_extension_does_not_hide_file_type_alias(tmp_path):
    path = tmp_path / "sharder.yaml"
    path.write_text("extension: null\nfile_type: txt\n", encoding="utf-8")

    assert build_config("src", "out", config_file=path, environ={}).extension == "txt"
