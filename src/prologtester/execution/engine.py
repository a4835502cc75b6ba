# src/prologtester/execution/engine.py
"""
Runs the tests of a scope one after another through the external interpreter.
"""
import asyncio
from collections.abc import Iterable

import structlog

from prologtester.config.models import InterpreterConfig
from prologtester.exceptions import ProcessFailure
from prologtester.execution.models import AllTests, RunReport, RunScope, SingleSuite, SingleTest, Verdict
from prologtester.execution.protocols import InterpreterResult, InterpreterRunner, NullNotifier, RunNotifier
from prologtester.state import RunSession
from prologtester.telemetry import StructLogger
from prologtester.tree import PlunitTest, TestTree

log: StructLogger = structlog.get_logger("execution.engine")

ERROR_PREFIX = "ERROR"


def build_goal(suite_name: str, test_name: str) -> str:
    """Goal that runs exactly one plunit test and then halts."""
    return f"run_tests({suite_name}:{test_name}),halt"


def classify_output(output: str) -> Verdict:
    """
    Passed unless some line starts with ``ERROR``; the first such line
    becomes the failure message. Lines split on newline characters only;
    form feeds and other Unicode breaks stay part of the line.
    """
    for line in output.split("\n"):
        if line.startswith(ERROR_PREFIX):
            return Verdict.fail(line.rstrip())
    return Verdict.ok()


class ExecutionEngine:
    """Expands a run scope and executes each test sequentially."""

    def __init__(
        self,
        tree: TestTree,
        runner: InterpreterRunner,
        notifier: RunNotifier | None = None,
        config: InterpreterConfig | None = None,
    ):
        self.tree = tree
        self.runner = runner
        self.notifier = notifier or NullNotifier()
        self.config = config or InterpreterConfig()

    def expand(self, scope: RunScope) -> list[tuple[PlunitTest, str]]:
        """Ordered ``(test, suite_name)`` pairs covered by ``scope``."""
        if isinstance(scope, AllTests):
            return [(test, suite.name) for _, suite in self.tree.iter_roots() for test in suite.tests()]
        if isinstance(scope, SingleSuite):
            return [(test, scope.suite.name) for test in scope.suite.tests()]
        if isinstance(scope, SingleTest):
            return [(scope.test, scope.test.suite_name)]
        raise TypeError(f"Unsupported run scope: {scope!r}")

    async def run(self, scope: RunScope, cancel_event: asyncio.Event | None = None) -> RunReport:
        return await self.run_many([scope], cancel_event)

    async def run_many(self, scopes: Iterable[RunScope], cancel_event: asyncio.Event | None = None) -> RunReport:
        """
        Runs the union of ``scopes`` in one session.

        A test selected by more than one scope runs once, at its first position.
        """
        pairs: list[tuple[PlunitTest, str]] = []
        seen: set[str] = set()
        for scope in scopes:
            for test, suite_name in self.expand(scope):
                if test.id not in seen:
                    seen.add(test.id)
                    pairs.append((test, suite_name))

        session = RunSession(tests=[test for test, _ in pairs])
        log.info("Starting test run", tests=len(pairs), emoji_key="run")

        for test, suite_name in pairs:
            if cancel_event is not None and cancel_event.is_set():
                session.mark_cancelled()
                break

            session.mark_started(test)
            self.notifier.started(test)
            verdict = await self._execute(test, suite_name)
            session.record(test, verdict)
            if verdict.passed:
                self.notifier.passed(test)
            else:
                self.notifier.failed(test, verdict.message or "")

        report = RunReport(results=tuple(session.results), cancelled=session.cancelled)
        log.info(
            "Test run finished",
            passed=report.passed,
            failed=report.failed,
            cancelled=report.cancelled,
            emoji_key="pass" if report.success else "fail",
        )
        self.notifier.ended(report)
        return report

    async def _execute(self, test: PlunitTest, suite_name: str) -> Verdict:
        """Runs one test; every failure mode becomes a failed verdict."""
        test_log = log.bind(suite=suite_name, test=test.name, path=str(test.source_path))
        try:
            result = await self.runner.run_goal(test.source_path, build_goal(suite_name, test.name))
            verdict = self._classify(result)
        except ProcessFailure as e:
            test_log.error("Interpreter process failed", error=str(e))
            return Verdict.fail(str(e))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            test_log.exception("Unexpected error while running test")
            return Verdict.fail(str(e) or type(e).__name__)

        if verdict.passed:
            test_log.debug("Test passed", emoji_key="pass")
        else:
            test_log.info("Test failed", message=verdict.message, emoji_key="fail")
        return verdict

    def _classify(self, result: InterpreterResult) -> Verdict:
        verdict = classify_output(result.output)
        if verdict.passed and self.config.strict_exit_code and result.exit_code != 0:
            return Verdict.fail(f"interpreter exited with status {result.exit_code}")
        return verdict

# 🔼⚙️
