# src/prologtester/runtime/notifier.py

"""
Renders run progress for a human on a rich console.
"""

import structlog
from rich.console import Console
from rich.markup import escape

from prologtester.execution.models import RunReport
from prologtester.execution.protocols import RunNotifier
from prologtester.state import STATE_EMOJI_MAP, TestState
from prologtester.telemetry import StructLogger
from prologtester.tree import PlunitTest

log: StructLogger = structlog.get_logger("runtime.notifier")


def _qualified(test: PlunitTest) -> str:
    return escape(f"{test.suite_name}:{test.name}")


class ConsoleNotifier(RunNotifier):
    """Writes one line per verdict and a summary when the run ends."""

    def __init__(self, console: Console, show_started: bool = False):
        self.console = console
        self.show_started = show_started

    def started(self, test: PlunitTest) -> None:
        if self.show_started:
            self._print(f"{STATE_EMOJI_MAP[TestState.STARTED]} [dim]{_qualified(test)}[/]")

    def passed(self, test: PlunitTest) -> None:
        self._print(f"{STATE_EMOJI_MAP[TestState.PASSED]} [green]{_qualified(test)}[/]")

    def failed(self, test: PlunitTest, message: str) -> None:
        self._print(f"{STATE_EMOJI_MAP[TestState.FAILED]} [red]{_qualified(test)}[/]")
        if message:
            self._print(f"    [red]{escape(message)}[/]")

    def ended(self, report: RunReport) -> None:
        style = "green" if report.success else "red"
        summary = f"[bold {style}]{report.passed} passed, {report.failed} failed[/]"
        if report.cancelled:
            summary += " [yellow](cancelled)[/]"
        self._print(summary)

    def _print(self, markup: str) -> None:
        try:
            self.console.print(markup)
        except Exception as e:
            # Output trouble must not turn into a test failure.
            log.warning("Failed to write run progress to console", error=str(e), exc_info=False)

# 🔼⚙️
