#
# src/prologtester/execution/protocols.py
#
"""
Defines protocols and data structures for test execution.
"""
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from attrs import define

if TYPE_CHECKING:
    from prologtester.execution.models import RunReport
    from prologtester.tree import PlunitTest


@define(frozen=True, slots=True)
class InterpreterResult:
    """
    Raw outcome of one interpreter invocation.

    ``output`` is stdout and stderr merged, decoded as text.
    """
    exit_code: int
    output: str
    command: tuple[str, ...] = ()


@runtime_checkable
class InterpreterRunner(Protocol):
    """
    Protocol for launching the external interpreter on a single goal.
    """
    async def run_goal(self, source_path: Path, goal: str) -> InterpreterResult:
        """
        Loads ``source_path`` and runs ``goal``.

        Args:
            source_path: The Prolog file to consult.
            goal: The goal expression, e.g. ``run_tests(s:t),halt``.

        Returns:
            An InterpreterResult once the process has exited.

        Raises:
            ProcessFailure: The interpreter could not be launched, was killed
                or timed out.
        """
        ...


@runtime_checkable
class RunNotifier(Protocol):
    """
    Receives per-test status as a run progresses.
    """
    def started(self, test: "PlunitTest") -> None: ...

    def passed(self, test: "PlunitTest") -> None: ...

    def failed(self, test: "PlunitTest", message: str) -> None: ...

    def ended(self, report: "RunReport") -> None: ...


class NullNotifier(RunNotifier):
    """Discards every notification."""

    def started(self, test: "PlunitTest") -> None:
        pass

    def passed(self, test: "PlunitTest") -> None:
        pass

    def failed(self, test: "PlunitTest", message: str) -> None:
        pass

    def ended(self, report: "RunReport") -> None:
        pass

# 🔼⚙️
