# tests/unit/test_notifier.py

import io
from unittest.mock import MagicMock

from rich.console import Console

from prologtester.execution.models import RunReport, TestResult, Verdict
from prologtester.runtime.notifier import ConsoleNotifier
from prologtester.tree import SuiteKey, TestTree, normalize_path

DOC = normalize_path("/w/a.pl")


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, force_terminal=False, width=120), buffer


def _test():
    tree = TestTree()
    suite = tree.add_suite(SuiteKey(DOC, "arithmetic"), "arithmetic", DOC)
    return tree.add_test(suite, "addition", DOC, 2)


def test_verdict_lines():
    console, buffer = _console()
    notifier = ConsoleNotifier(console)
    test = _test()

    notifier.started(test)
    notifier.passed(test)
    notifier.failed(test, "ERROR: [bad] thing")

    output = buffer.getvalue()
    assert output.count("arithmetic:addition") == 2
    assert "ERROR: [bad] thing" in output


def test_started_lines_are_optional():
    console, buffer = _console()
    ConsoleNotifier(console, show_started=True).started(_test())
    assert "arithmetic:addition" in buffer.getvalue()


def test_summary_line():
    console, buffer = _console()
    report = RunReport(
        results=(
            TestResult("t1", "s", "a", Verdict.ok()),
            TestResult("t2", "s", "b", Verdict.fail("ERROR")),
        ),
        cancelled=True,
    )
    ConsoleNotifier(console).ended(report)
    output = buffer.getvalue()
    assert "1 passed, 1 failed" in output
    assert "(cancelled)" in output


def test_console_errors_are_contained():
    console = MagicMock()
    console.print.side_effect = OSError("closed")
    ConsoleNotifier(console).passed(_test())
