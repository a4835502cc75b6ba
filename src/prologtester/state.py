# src/prologtester/state.py
#
"""
Per-run state tracking for the tests selected by a run request.
"""

from enum import Enum, auto

import structlog
from attrs import field, mutable

from prologtester.exceptions import StateTransitionError
from prologtester.execution.models import TestResult, Verdict
from prologtester.tree import PlunitTest

log: structlog.stdlib.BoundLogger = structlog.get_logger("state")


class TestState(Enum):
    """Lifecycle of a single test within one run."""
    __test__ = False

    QUEUED = auto()  # In scope, not reached yet.
    STARTED = auto()  # Interpreter launched.
    PASSED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (TestState.PASSED, TestState.FAILED)


STATE_EMOJI_MAP = {
    TestState.QUEUED: "⏳",
    TestState.STARTED: "🔄",
    TestState.PASSED: "✅",
    TestState.FAILED: "❌",
}


@mutable(slots=True)
class RunSession:
    """
    Holds the state of every test in one run request.

    Mutable because it is updated after each test. A terminal state is
    recorded at most once per test; tests left unreached by a cancellation
    keep their QUEUED state and have no result.
    """

    tests: list[PlunitTest] = field(factory=list)
    states: dict[str, TestState] = field(init=False, factory=dict)
    results: list[TestResult] = field(init=False, factory=list)
    cancelled: bool = field(default=False, init=False)

    def __attrs_post_init__(self):
        for test in self.tests:
            self.states[test.id] = TestState.QUEUED
        log.debug("Initialized run session", test_count=len(self.tests))

    def state_of(self, test: PlunitTest) -> TestState:
        return self.states[test.id]

    def mark_started(self, test: PlunitTest) -> None:
        self._transition(test, TestState.STARTED)

    def record(self, test: PlunitTest, verdict: Verdict) -> TestResult:
        """Records the terminal verdict for ``test``."""
        new_state = TestState.PASSED if verdict.passed else TestState.FAILED
        self._transition(test, new_state)
        result = TestResult(
            test_id=test.id,
            suite_name=test.suite_name,
            test_name=test.name,
            verdict=verdict,
        )
        self.results.append(result)
        return result

    def mark_cancelled(self) -> None:
        self.cancelled = True
        unreached = sum(1 for s in self.states.values() if not s.is_terminal)
        log.info("Run cancelled", unreached=unreached)

    def _transition(self, test: PlunitTest, new_state: TestState) -> None:
        old_state = self.states.get(test.id)
        if old_state is None:
            raise StateTransitionError(f"Test '{test.id}' is not part of this run")
        if old_state.is_terminal:
            raise StateTransitionError(
                f"Test '{test.id}' already finished as {old_state.name}; cannot become {new_state.name}"
            )

        self.states[test.id] = new_state
        log_func = log.warning if new_state == TestState.FAILED else log.debug
        log_func(
            "Test state changed",
            test=test.id,
            old_state=old_state.name,
            new_state=new_state.name,
            emoji=STATE_EMOJI_MAP[new_state],
        )

# 🔼⚙️
