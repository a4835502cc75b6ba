#
# src/prologtester/execution/__init__.py
#
"""
Test execution sub-package for prologtester.

The engine lives in ``prologtester.execution.engine``; it is not re-exported
here because it depends on ``prologtester.state``, which depends on the models.
"""
from .factory import get_interpreter_runner
from .models import AllTests, RunReport, RunScope, SingleSuite, SingleTest, TestResult, Verdict
from .protocols import InterpreterResult, InterpreterRunner, NullNotifier, RunNotifier
from .subprocess_runner import SubprocessInterpreterRunner

__all__ = [
    "AllTests",
    "InterpreterResult",
    "InterpreterRunner",
    "NullNotifier",
    "RunNotifier",
    "RunReport",
    "RunScope",
    "SingleSuite",
    "SingleTest",
    "SubprocessInterpreterRunner",
    "TestResult",
    "Verdict",
    "get_interpreter_runner",
]

# 🔼⚙️
