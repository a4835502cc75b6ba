# tests/unit/test_config.py

"""Tests for TOML configuration loading and validation."""

from pathlib import Path

import pytest

from prologtester.config import ProjectConfig, load_config, parse_config
from prologtester.exceptions import ConfigurationError

SAMPLE_TOML = """
[global]
log_level = "DEBUG"

[workspace]
roots = ["src", "/abs/tests"]

[discovery]
extensions = [".pl", ".plt"]
exclude = ["build"]
duplicate_policy = "skip"

[interpreter]
executable = "/usr/local/bin/swipl"
extra_args = ["-q"]
timeout = 30
strict_exit_code = true
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PROLOGTESTER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PROLOGTESTER_INTERPRETER", raising=False)


def test_defaults_without_file(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = load_config()
    assert config == ProjectConfig()
    assert config.interpreter.executable == "swipl"
    assert config.interpreter.timeout == 120.0
    assert config.discovery.extensions == (".pl",)
    assert config.discovery.duplicate_policy == "disambiguate"


def test_full_file(tmp_path: Path):
    config_file = tmp_path / "prologtester.toml"
    config_file.write_text(SAMPLE_TOML)

    config = load_config(config_file)

    assert config.global_config.log_level == "DEBUG"
    assert config.workspace.roots == (config_file.resolve().parent / "src", Path("/abs/tests"))
    assert config.discovery.extensions == (".pl", ".plt")
    assert config.discovery.exclude == ("build",)
    assert config.discovery.duplicate_policy == "skip"
    assert config.interpreter.extra_args == ("-q",)
    assert config.interpreter.timeout == 30
    assert config.interpreter.strict_exit_code is True
    assert config.config_file_path == config_file.resolve()


def test_default_file_in_cwd_is_picked_up(tmp_path: Path, monkeypatch):
    (tmp_path / "prologtester.toml").write_text('[interpreter]\nexecutable = "scryer"\n')
    monkeypatch.chdir(tmp_path)
    assert load_config().interpreter.executable == "scryer"


def test_zero_timeout_disables_it():
    config = parse_config({"interpreter": {"timeout": 0}})
    assert config.interpreter.timeout is None


def test_environment_overrides_file(tmp_path: Path, monkeypatch):
    config_file = tmp_path / "prologtester.toml"
    config_file.write_text(SAMPLE_TOML)
    monkeypatch.setenv("PROLOGTESTER_INTERPRETER", "/env/swipl")
    monkeypatch.setenv("PROLOGTESTER_LOG_LEVEL", "warning")

    config = load_config(config_file)

    assert config.interpreter.executable == "/env/swipl"
    assert config.interpreter.extra_args == ("-q",)
    assert config.global_config.log_level == "warning"


@pytest.mark.parametrize(
    "data, message",
    [
        ({"plugins": {}}, "Unknown section"),
        ({"discovery": {"suffixes": [".pl"]}}, "Unknown key"),
        ({"discovery": {"duplicate_policy": "merge"}}, "duplicate_policy"),
        ({"discovery": {"extensions": ["pl"]}}, "Invalid extension"),
        ({"interpreter": {"timeout": -1}}, "must be positive"),
        ({"global": {"log_level": "LOUD"}}, "Invalid log_level"),
        ({"workspace": "src"}, "must be a table"),
    ],
)
def test_invalid_values_raise(data, message):
    with pytest.raises(ConfigurationError, match=message):
        parse_config(data)


def test_invalid_toml(tmp_path: Path):
    config_file = tmp_path / "prologtester.toml"
    config_file.write_text("[interpreter\nexecutable = ")
    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_config(config_file)


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "nope.toml")
