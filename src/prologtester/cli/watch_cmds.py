# src/prologtester/cli/watch_cmds.py

import asyncio
import logging
import sys
from pathlib import Path

import click
import structlog

from prologtester.cli.utils import config_path_option, load_config_or_exit, logging_options, roots_argument
from prologtester.runtime.controller import TestController
from prologtester.runtime.notifier import ConsoleNotifier
from prologtester.runtime.orchestrator import WatchOrchestrator
from prologtester.telemetry import StructLogger
from prologtester.telemetry.logger import make_console

log: StructLogger = structlog.get_logger("cli.watch")


def _run_headless_orchestrator(orchestrator: WatchOrchestrator) -> int:
    """
    Runs the orchestrator under asyncio.run(), which cancels the main task
    on SIGINT; the orchestrator's own cleanup runs before we get control back.
    """
    try:
        asyncio.run(orchestrator.run())
        return 0
    except KeyboardInterrupt:
        log.warning("Shutdown initiated by KeyboardInterrupt (CTRL-C).")
        return 130
    except Exception:
        log.critical("Orchestrator exited with an unhandled exception.", exc_info=True)
        return 1
    finally:
        logging.shutdown()


@click.command(name="watch")
@config_path_option
@roots_argument
@click.option(
    "--run-on-change",
    is_flag=True,
    default=False,
    help="Run the tests of a file each time it changes.",
)
@logging_options
@click.pass_context
def watch_cli(
    ctx: click.Context,
    config_path: Path | None,
    roots: tuple[Path, ...],
    run_on_change: bool,
    **kwargs,
):
    """Keep the test tree in sync with file changes (non-interactive mode)."""
    config = load_config_or_exit(ctx, config_path, roots, **kwargs)
    shutdown_event = asyncio.Event()

    log.info("Initializing watch command...", roots=[str(r) for r in config.workspace.roots])

    controller = TestController(config, notifier=ConsoleNotifier(make_console()))
    orchestrator = WatchOrchestrator(controller, shutdown_event, run_on_change=run_on_change)

    exit_code = _run_headless_orchestrator(orchestrator)

    log.info("'watch' command finished.")
    if exit_code != 0:
        sys.exit(exit_code)

# 🔼⚙️
