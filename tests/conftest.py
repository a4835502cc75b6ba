from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from prologtester.config import DiscoveryConfig, InterpreterConfig, ProjectConfig, WorkspaceConfig
from prologtester.exceptions import ReadFailure
from prologtester.execution.protocols import InterpreterResult
from prologtester.tree import normalize_path

ARITHMETIC_SOURCE = """\
:- begin_tests(arithmetic).

test(addition) :-
    X is 1 + 1,
    X =:= 2.

test(subtraction) :-
    X is 3 - 1,
    X =:= 2.

:- end_tests(arithmetic).
"""

LISTS_SOURCE = """\
:- begin_tests(lists).

test(member, [nondet]) :-
    member(b, [a, b, c]).

:- end_tests(lists).

:- begin_tests(strings).
test(concat) :- atom_concat(a, b, ab).
:- end_tests(strings).
"""


class FakeReader:
    """In-memory SourceReader; paths missing from ``files`` fail to read."""

    def __init__(self, files: dict[Path, str] | None = None):
        self.files = {normalize_path(p): c for p, c in (files or {}).items()}
        self.reads: list[Path] = []

    async def read(self, path: Path) -> str:
        path = normalize_path(path)
        self.reads.append(path)
        if path not in self.files:
            raise ReadFailure(path, FileNotFoundError(str(path)))
        return self.files[path]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace root holding the arithmetic and lists samples."""
    root = tmp_path / "ws"
    root.mkdir()
    (root / "arith.pl").write_text(ARITHMETIC_SOURCE)
    (root / "sub").mkdir()
    (root / "sub" / "lists.pl").write_text(LISTS_SOURCE)
    (root / "notes.txt").write_text(":- begin_tests(ignored).\ntest(x).\n:- end_tests(ignored).\n")
    return root


@pytest.fixture
def project_config(workspace: Path) -> ProjectConfig:
    return ProjectConfig(
        workspace=WorkspaceConfig(roots=(workspace,)),
        discovery=DiscoveryConfig(),
        interpreter=InterpreterConfig(timeout=5.0),
    )


@pytest.fixture
def passing_runner() -> AsyncMock:
    """InterpreterRunner double whose every goal passes."""
    runner = AsyncMock()
    runner.run_goal.return_value = InterpreterResult(exit_code=0, output="% All 1 tests passed\n")
    return runner


@pytest.fixture
def arithmetic_source() -> str:
    return ARITHMETIC_SOURCE


@pytest.fixture
def lists_source() -> str:
    return LISTS_SOURCE


@pytest.fixture
def make_reader():
    """Factory for in-memory readers: ``make_reader({path: content})``."""
    return FakeReader
