# src/prologtester/cli/run_cmds.py
#

import asyncio
import contextlib
import signal
from pathlib import Path

import click
import structlog

from prologtester.cli.utils import config_path_option, load_config_or_exit, logging_options, roots_argument
from prologtester.execution.models import RunReport
from prologtester.runtime.controller import TestController
from prologtester.runtime.notifier import ConsoleNotifier
from prologtester.telemetry import StructLogger
from prologtester.telemetry.logger import make_console
from prologtester.tree import TestTree, TreeItem, normalize_path

log: StructLogger = structlog.get_logger("cli.run")

EXIT_OK = 0
EXIT_TESTS_FAILED = 1
EXIT_NO_TESTS = 5
EXIT_INTERRUPTED = 130


class NoMatchingTests(Exception):
    """Selection options matched nothing in the discovered tree."""


def select_items(
    tree: TestTree,
    suite_name: str | None = None,
    test_name: str | None = None,
    file_path: Path | None = None,
) -> list[TreeItem] | None:
    """
    Maps the CLI selection options onto tree items.

    Returns None when no option was given, meaning every test.
    """
    if suite_name is None and test_name is None and file_path is None:
        return None

    suites = [suite for _, suite in tree.iter_roots()]
    if file_path is not None:
        wanted = normalize_path(file_path)
        suites = [s for s in suites if s.source_path == wanted]
    if suite_name is not None:
        suites = [s for s in suites if s.name == suite_name]

    items: list[TreeItem]
    if test_name is None:
        items = list(suites)
    else:
        items = [test for suite in suites for test in suite.tests() if test.name == test_name]

    if not items:
        raise NoMatchingTests("No tests matched the selection")
    return items


def _handle_signal(sig: int, cancel_event: asyncio.Event) -> None:
    signame = signal.Signals(sig).name
    base_log = structlog.get_logger("cli.run.signal")
    if not cancel_event.is_set():
        base_log.warning("Received interrupt; finishing current test then stopping", signal=signame)
        cancel_event.set()
    else:
        base_log.warning("Cancellation already requested, signal ignored.", signal=signame)


async def execute_run(
    controller: TestController,
    suite_name: str | None,
    test_name: str | None,
    file_path: Path | None,
) -> RunReport:
    """Discovers, selects and runs; always disposes the controller."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, _handle_signal, signal.SIGINT, cancel_event)
    except (NotImplementedError, RuntimeError):
        log.debug("Signal handlers unavailable; Ctrl-C will abort immediately.")

    try:
        await controller.resolve(None)
        if file_path is not None and not controller.tree.suites_for(normalize_path(file_path)):
            # A file outside every workspace root is still runnable on request.
            await controller.on_document_changed(file_path)
        include = select_items(controller.tree, suite_name, test_name, file_path)
        return await controller.run(include, cancel_event)
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)
        await controller.dispose()


@click.command(name="run")
@config_path_option
@roots_argument
@click.option("-s", "--suite", "suite_name", default=None, help="Run only the suite with this name.")
@click.option("-t", "--test", "test_name", default=None, help="Run only tests with this name.")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Run only suites declared in this file.",
)
@click.option("--show-started", is_flag=True, default=False, help="Print a line as each test starts.")
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    config_path: Path | None,
    roots: tuple[Path, ...],
    suite_name: str | None,
    test_name: str | None,
    file_path: Path | None,
    show_started: bool,
    **kwargs,
):
    """Run plunit tests, one interpreter process per test."""
    config = load_config_or_exit(ctx, config_path, roots, **kwargs)
    controller = TestController(config, notifier=ConsoleNotifier(make_console(), show_started=show_started))

    try:
        report = asyncio.run(execute_run(controller, suite_name, test_name, file_path))
    except NoMatchingTests as e:
        click.echo(f"Error: {e}.", err=True)
        ctx.exit(EXIT_NO_TESTS)
    except KeyboardInterrupt:
        log.warning("Run aborted by KeyboardInterrupt.")
        ctx.exit(EXIT_INTERRUPTED)

    if not report.results and not report.cancelled:
        click.echo("No tests found.", err=True)
        ctx.exit(EXIT_NO_TESTS)
    if report.cancelled:
        ctx.exit(EXIT_INTERRUPTED)
    ctx.exit(EXIT_OK if report.success else EXIT_TESTS_FAILED)

# 🔼⚙️
