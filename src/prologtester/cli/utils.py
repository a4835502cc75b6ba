# src/prologtester/cli/utils.py

import logging
from collections.abc import Sequence
from pathlib import Path

import attrs
import click
import structlog

from prologtester.config import ProjectConfig, WorkspaceConfig, load_config
from prologtester.exceptions import ConfigurationError
from prologtester.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


LOGGING_OPTIONS = (
    click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        envvar="PROLOGTESTER_LOG_LEVEL",
        help="Logging level; overrides [global] log_level from the config file.",
    ),
    click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        envvar="PROLOGTESTER_LOG_FILE",
        help="Also write JSON logs to this file.",
    ),
    click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="PROLOGTESTER_JSON_LOGS",
        help="Render console logs (stderr) as JSON.",
    ),
)


def logging_options(f):
    """Adds --log-level, --log-file and --json-logs to a command."""
    for option in reversed(LOGGING_OPTIONS):
        f = option(f)
    return f


def config_path_option(f):
    """Decorator for the shared ``--config-path`` option."""
    return click.option(
        "-c",
        "--config-path",
        type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
        default=None,
        envvar="PROLOGTESTER_CONF",
        help="Path to the prologtester.toml file (env var PROLOGTESTER_CONF). "
        "Defaults to ./prologtester.toml when present.",
        show_envvar=True,
    )(f)


def roots_argument(f):
    """Decorator for optional positional workspace roots."""
    return click.argument(
        "roots",
        nargs=-1,
        type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    )(f)


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
) -> None:
    """
    Sets up logging from the group options, with subcommand options winning.
    """
    obj = ctx.find_root().obj or {}
    log_level_str = (local_log_level or obj.get("LOG_LEVEL") or default_log_level).upper()
    log_file_path = local_log_file or obj.get("LOG_FILE")
    use_json_logs = obj.get("JSON_LOGS", False) if local_json_logs is None else local_json_logs

    numeric_level = logging.getLevelName(log_level_str)
    if not isinstance(numeric_level, int):
        log_level_str, numeric_level = "INFO", logging.INFO

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging configured",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def load_config_or_exit(
    ctx: click.Context,
    config_path: Path | None,
    roots: Sequence[Path] = (),
    **logging_kwargs,
) -> ProjectConfig:
    """
    Loads the configuration, applies positional roots, and (re)configures
    logging with the file's level as the default.
    """
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem: {e}", err=True)
        ctx.exit(1)

    if roots:
        config = attrs.evolve(config, workspace=WorkspaceConfig(roots=tuple(roots)))

    setup_logging_from_context(
        ctx,
        local_log_level=logging_kwargs.get("log_level"),
        local_log_file=logging_kwargs.get("log_file"),
        local_json_logs=logging_kwargs.get("json_logs"),
        default_log_level=config.global_config.log_level if config.config_file_path else "WARNING",
    )
    return config

# ⚙️🛠️
