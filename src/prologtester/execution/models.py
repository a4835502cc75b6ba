#
# src/prologtester/execution/models.py
#
"""
Run scopes, verdicts and the run report.
"""
from typing import TypeAlias

from attrs import define, field

from prologtester.tree import PlunitSuite, PlunitTest


@define(frozen=True, slots=True)
class AllTests:
    """Every test of every suite, in tree order."""


@define(frozen=True, slots=True)
class SingleSuite:
    suite: PlunitSuite


@define(frozen=True, slots=True)
class SingleTest:
    test: PlunitTest


RunScope: TypeAlias = AllTests | SingleSuite | SingleTest


@define(frozen=True, slots=True)
class Verdict:
    """Terminal classification of one test execution."""
    passed: bool
    message: str | None = None

    @classmethod
    def ok(cls) -> "Verdict":
        return cls(passed=True)

    @classmethod
    def fail(cls, message: str) -> "Verdict":
        return cls(passed=False, message=message)


@define(frozen=True, slots=True)
class TestResult:
    __test__ = False

    test_id: str
    suite_name: str
    test_name: str
    verdict: Verdict


@define(frozen=True, slots=True)
class RunReport:
    """Summary produced at the end of every run, even when every test failed."""
    results: tuple[TestResult, ...] = field(factory=tuple)
    cancelled: bool = False

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.verdict.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.verdict.passed)

    @property
    def failures(self) -> list[str]:
        return [r.verdict.message or "" for r in self.results if not r.verdict.passed]

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.cancelled

# 🔼⚙️
