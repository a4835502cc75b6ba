# src/prologtester/discovery/scanner.py

"""
Line-oriented recognizer for plunit suite and test markers.

Not a Prolog parser: the markers always appear on a
single line starting with a fixed directive, so a substring test plus the
first parenthesized group is enough.
"""

import re
from collections.abc import Iterator
from typing import TypeAlias

from attrs import define

SUITE_BEGIN_MARKER = ":- begin_tests("
SUITE_END_MARKER = ":- end_tests("
TEST_CASE_MARKER = "test("

_FIRST_GROUP = re.compile(r"\(([^)]*)\)")


@define(frozen=True, slots=True)
class SuiteBegin:
    name: str
    line: int


@define(frozen=True, slots=True)
class SuiteEnd:
    line: int


@define(frozen=True, slots=True)
class TestCase:
    __test__ = False  # keep pytest from collecting this

    name: str
    line: int


@define(frozen=True, slots=True)
class ScanWarning:
    """A marker line whose name could not be extracted. Recovered locally."""
    line: int
    message: str
    text: str


ScanEvent: TypeAlias = SuiteBegin | SuiteEnd | TestCase | ScanWarning


def extract_name(line: str) -> str | None:
    """
    Returns the marker argument from the first ``(...)`` group on the line.

    The argument is cut at its first comma so that option lists
    (``test(foo, [nondet])``) do not leak into the name. Empty names yield None.
    """
    match = _FIRST_GROUP.search(line)
    if not match:
        return None
    name = match.group(1).split(",", 1)[0].strip()
    return name or None


def scan_markers(content: str) -> Iterator[ScanEvent]:
    """
    Yields scan events for one document, in line order.

    Pure and restartable: calling it again on the same content yields the
    same sequence.
    """
    in_suite = False
    for index, raw_line in enumerate(content.split("\n")):
        line = raw_line.rstrip("\r")

        if SUITE_BEGIN_MARKER in line:
            name = extract_name(line)
            if name is None:
                yield ScanWarning(index, "Failed to extract suite name", line)
                continue
            in_suite = True
            yield SuiteBegin(name, index)
        elif SUITE_END_MARKER in line:
            in_suite = False
            yield SuiteEnd(index)
        elif in_suite and line.strip().startswith(TEST_CASE_MARKER):
            name = extract_name(line)
            if name is None:
                yield ScanWarning(index, "Failed to extract test name", line)
                continue
            yield TestCase(name, index)


# 🔼⚙️
