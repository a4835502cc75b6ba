# src/prologtester/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from prologtester.cli.utils import config_path_option, load_config_or_exit, logging_options
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@config_path_option
@logging_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path | None, **kwargs):
    """Load, validate, and display the configuration."""
    config = load_config_or_exit(ctx, config_path, **kwargs)
    log.info("Executing 'config show' command", config_path=str(config_path or "defaults"))

    click.echo(pretty_repr(config, expand_all=True))

    missing = [root for root in config.workspace.roots if not root.is_dir()]
    for root in missing:
        log.warning("Workspace root does not exist", root=str(root))
    if missing:
        click.echo(f"Warning: {len(missing)} workspace root(s) do not exist.", err=True)

# 🔼⚙️
