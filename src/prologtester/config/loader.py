#
# config/loader.py
#
"""
Loads prologtester configuration from TOML into the attrs models.

Precedence handled here: environment variables > config file > defaults.
CLI options are layered on top by the commands themselves.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

import attrs
import structlog

from prologtester.config.models import (
    DiscoveryConfig,
    GlobalConfig,
    InterpreterConfig,
    ProjectConfig,
    WorkspaceConfig,
)
from prologtester.exceptions import ConfigurationError
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")

DEFAULT_CONFIG_NAME = "prologtester.toml"
ENV_LOG_LEVEL = "PROLOGTESTER_LOG_LEVEL"
ENV_INTERPRETER = "PROLOGTESTER_INTERPRETER"

_SECTION_MODELS: dict[str, type] = {
    "global": GlobalConfig,
    "workspace": WorkspaceConfig,
    "discovery": DiscoveryConfig,
    "interpreter": InterpreterConfig,
}


def _toml_name(attribute: attrs.Attribute) -> str:
    return attribute.metadata.get("toml_name", attribute.name)


def _build_section(name: str, model: type, data: Any, config_path: Path | None) -> Any:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section [{name}] must be a table", config_path)

    known = {a.name for a in attrs.fields(model)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown key(s) in [{name}]: {', '.join(sorted(unknown))}", config_path
        )

    values = dict(data)
    if model is InterpreterConfig and values.get("timeout") == 0:
        values["timeout"] = None

    try:
        return model(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in [{name}]: {e}", config_path) from e


def _apply_env_overrides(config: ProjectConfig) -> ProjectConfig:
    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        try:
            config = attrs.evolve(config, global_config=GlobalConfig(log_level=log_level))
        except ValueError as e:
            raise ConfigurationError(f"Invalid {ENV_LOG_LEVEL}: {e}") from e
        log.debug("Applied environment override", variable=ENV_LOG_LEVEL, value=log_level)

    interpreter = os.environ.get(ENV_INTERPRETER)
    if interpreter:
        config = attrs.evolve(
            config, interpreter=attrs.evolve(config.interpreter, executable=interpreter)
        )
        log.debug("Applied environment override", variable=ENV_INTERPRETER, value=interpreter)
    return config


def parse_config(data: dict[str, Any], config_path: Path | None = None) -> ProjectConfig:
    """Builds a ProjectConfig from an already-parsed TOML document."""
    unknown = set(data) - set(_SECTION_MODELS)
    if unknown:
        raise ConfigurationError(f"Unknown section(s): {', '.join(sorted(unknown))}", config_path)

    sections: dict[str, Any] = {}
    for attribute in attrs.fields(ProjectConfig):
        table = _toml_name(attribute)
        if table in data:
            sections[attribute.name] = _build_section(table, _SECTION_MODELS[table], data[table], config_path)

    config = ProjectConfig(**sections, config_file_path=config_path)

    # Relative workspace roots are anchored at the config file's directory.
    if config_path is not None:
        base = config_path.parent
        roots = tuple(root if root.is_absolute() else base / root for root in config.workspace.roots)
        config = attrs.evolve(config, workspace=WorkspaceConfig(roots=roots))
    return config


def load_config(config_path: Path | None = None) -> ProjectConfig:
    """
    Loads configuration.

    With no explicit path, ``prologtester.toml`` in the working directory is
    used when present, and defaults otherwise.
    """
    if config_path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.is_file():
            log.debug("No configuration file found, using defaults", looked_for=str(candidate))
            return _apply_env_overrides(ProjectConfig())
        config_path = candidate

    load_log = log.bind(path=str(config_path))
    load_log.debug("Loading configuration file", emoji_key="read")
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError("Configuration file not found", config_path) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML: {e}", config_path) from e
    except OSError as e:
        raise ConfigurationError(f"Could not read configuration file: {e}", config_path) from e

    config = _apply_env_overrides(parse_config(data, config_path.resolve()))
    load_log.info("Configuration loaded", roots=[str(r) for r in config.workspace.roots])
    return config


# 🔼⚙️
