# src/prologtester/cli/main.py

"""
Click entry point for prologtester.

The group only records the global logging options; each subcommand loads the
configuration and finishes logging setup itself.
"""

import click
import structlog

from prologtester import __version__
from prologtester.cli.config_cmds import config_cli
from prologtester.cli.list_cmds import list_cli
from prologtester.cli.run_cmds import run_cli
from prologtester.cli.utils import logging_options, setup_logging_from_context
from prologtester.cli.watch_cmds import watch_cli
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.main")

SUBCOMMANDS = (config_cli, list_cli, run_cli, watch_cli)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="prologtester")
@logging_options
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_file: str | None, json_logs: bool | None):
    """
    Prologtester: discover and run SWI-Prolog plunit tests.

    Finds begin_tests/end_tests blocks in Prolog sources and runs each test
    in its own interpreter process.
    Configuration precedence: CLI options > Environment Variables > Config File > Defaults.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(LOG_LEVEL=log_level, LOG_FILE=log_file, JSON_LOGS=bool(json_logs))

    setup_logging_from_context(ctx)
    log.debug("CLI group ready", subcommand=ctx.invoked_subcommand, log_level=log_level)


for command in SUBCOMMANDS:
    cli.add_command(command)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
