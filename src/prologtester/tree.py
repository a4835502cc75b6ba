# src/prologtester/tree.py
"""
In-memory model of discovered plunit suites and tests.

Suites are the roots; each owns its tests. Identifiers are derived from the
source path and the name, never the line, so a test keeps its identity across
edits that only shift lines.
"""

import os
from collections.abc import Iterator
from pathlib import Path
from typing import TypeAlias

import structlog
from attrs import define, field, mutable

from prologtester.exceptions import DuplicateKeyError
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("tree")

SUITE_ID_PREFIX = "suite:"
TEST_ID_PREFIX = "test:"


def normalize_path(path: Path | str) -> Path:
    """Absolute, lexically normalized path used for every document identity."""
    return Path(os.path.abspath(path))


@define(frozen=True, slots=True)
class SuiteKey:
    """Composite identity of a suite: ``(source_path, name)``."""
    source_path: Path
    name: str

    @property
    def id(self) -> str:
        return f"{SUITE_ID_PREFIX}{self.source_path}:{self.name}"


@define(frozen=True, slots=True)
class TestKey:
    """Composite identity of a test: ``(source_path, name)``."""
    __test__ = False

    source_path: Path
    name: str

    @property
    def id(self) -> str:
        return f"{TEST_ID_PREFIX}{self.source_path}:{self.name}"


@mutable(slots=True, eq=False)
class PlunitTest:
    """A single ``test(...)`` clause inside a suite."""
    id: str = field()
    name: str = field()
    source_path: Path = field()
    line: int = field()
    # Non-owning back-reference; the suite owns the test.
    suite: "PlunitSuite" = field(repr=False)

    @property
    def label(self) -> str:
        return self.name

    @property
    def suite_name(self) -> str:
        return self.suite.name


@mutable(slots=True, eq=False)
class PlunitSuite:
    """A ``begin_tests``/``end_tests`` block."""
    id: str = field()
    name: str = field()
    source_path: Path = field()
    line: int = field(default=0)
    children: dict[str, PlunitTest] = field(factory=dict, repr=False)
    can_resolve_children: bool = field(default=True, init=False)

    @property
    def label(self) -> str:
        return self.name

    def tests(self) -> list[PlunitTest]:
        return list(self.children.values())


TreeItem: TypeAlias = PlunitSuite | PlunitTest


class TestTree:
    """
    Holds suites in discovery order plus an index of every test by identifier.

    Mutations never await, so under the asyncio scheduler a removal is never
    observed half-done by a concurrent reader.
    """

    __test__ = False

    def __init__(self) -> None:
        self._suites: dict[str, PlunitSuite] = {}
        self._tests: dict[str, PlunitTest] = {}

    def __len__(self) -> int:
        return len(self._suites)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._suites or item_id in self._tests

    @property
    def test_count(self) -> int:
        return len(self._tests)

    def add_suite(self, key: SuiteKey, name: str, source_path: Path, line: int = 0) -> PlunitSuite:
        suite_id = key.id
        if suite_id in self._suites:
            raise DuplicateKeyError(suite_id)
        suite = PlunitSuite(id=suite_id, name=name, source_path=source_path, line=line)
        self._suites[suite_id] = suite
        log.debug("Suite added", suite=name, path=str(source_path), line=line)
        return suite

    def add_test(
        self,
        suite: PlunitSuite,
        name: str,
        source_path: Path,
        line: int,
        key: TestKey | None = None,
    ) -> PlunitTest:
        """
        Inserts a test under ``suite``.

        ``key`` overrides the default ``(source_path, name)`` identity, which is
        how callers disambiguate duplicate names.
        """
        test_id = (key or TestKey(source_path, name)).id
        if test_id in self._tests:
            raise DuplicateKeyError(test_id)
        test = PlunitTest(id=test_id, name=name, source_path=source_path, line=line, suite=suite)
        suite.children[test_id] = test
        self._tests[test_id] = test
        return test

    def remove_all_for_document(self, source_path: Path) -> int:
        """Removes every suite owned by ``source_path`` and all of their tests."""
        doomed = [suite for suite in self._suites.values() if suite.source_path == source_path]
        for suite in doomed:
            for test_id in suite.children:
                self._tests.pop(test_id, None)
            del self._suites[suite.id]
        if doomed:
            log.debug("Removed suites for document", path=str(source_path), count=len(doomed))
        return len(doomed)

    def iter_roots(self) -> Iterator[tuple[str, PlunitSuite]]:
        # Snapshot so that callers may mutate the tree while iterating.
        yield from list(self._suites.items())

    def get(self, item_id: str) -> TreeItem | None:
        return self._suites.get(item_id) or self._tests.get(item_id)

    def suites_for(self, source_path: Path) -> list[PlunitSuite]:
        return [suite for suite in self._suites.values() if suite.source_path == source_path]

    def find_by_location(self, source_path: Path, line: int) -> TreeItem | None:
        """
        Returns the test declared on ``line``, else the closest suite that
        begins at or before it, else None.
        """
        containing: PlunitSuite | None = None
        for suite in self.suites_for(source_path):
            for test in suite.children.values():
                if test.line == line:
                    return test
            if suite.line <= line and (containing is None or suite.line > containing.line):
                containing = suite
        return containing

    def documents(self) -> set[Path]:
        return {suite.source_path for suite in self._suites.values()}

    def clear(self) -> None:
        self._suites.clear()
        self._tests.clear()


# 🔼⚙️
