# src/prologtester/discovery/engine.py
"""
Populates the test tree from Prolog source files.

Reads are the only suspension point: a file's content is read first and all of
its scan events are then applied to the tree in one uninterrupted stretch.
"""

import asyncio
import itertools
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from prologtester.config.models import DiscoveryConfig
from prologtester.discovery.scanner import ScanWarning, SuiteBegin, SuiteEnd, TestCase, scan_markers
from prologtester.exceptions import DuplicateKeyError, EnumerationFailure, ReadFailure
from prologtester.telemetry import StructLogger
from prologtester.tree import PlunitSuite, SuiteKey, TestKey, TestTree, normalize_path

log: StructLogger = structlog.get_logger("discovery.engine")


@runtime_checkable
class SourceReader(Protocol):
    """Reads the full text of a source document."""

    async def read(self, path: Path) -> str:
        """Returns the content of ``path``; raises ReadFailure if it cannot."""
        ...


class FileSourceReader(SourceReader):
    """Reads UTF-8 files from disk in a worker thread."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def read(self, path: Path) -> str:
        try:
            return await asyncio.to_thread(path.read_text, encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ReadFailure(path, e) from e


def list_source_files(root: Path, extensions: Iterable[str], exclude: Iterable[str]) -> list[Path]:
    """Lists matching files under ``root``, pruning excluded directory names."""
    if not root.is_dir():
        raise EnumerationFailure(root, NotADirectoryError(f"'{root}' is not a directory"))

    suffixes = tuple(extensions)
    excluded = set(exclude)
    errors: list[OSError] = []
    found: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=errors.append):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        found.extend(Path(dirpath) / name for name in sorted(filenames) if name.endswith(suffixes))

    # An error on the root itself means nothing was listed at all.
    if errors and not found and Path(errors[0].filename or "") == root:
        raise EnumerationFailure(root, errors[0])
    for error in errors:
        log.warning("Skipped unreadable directory", root=str(root), error=str(error))
    return found


class DiscoveryEngine:
    """Enumerates workspace roots and turns scan events into tree entries."""

    def __init__(
        self,
        tree: TestTree,
        config: DiscoveryConfig,
        roots: Iterable[Path],
        reader: SourceReader | None = None,
    ):
        self.tree = tree
        self.config = config
        self.roots = [normalize_path(r) for r in roots]
        self.reader = reader or FileSourceReader()
        log.debug("DiscoveryEngine initialized.", roots=[str(r) for r in self.roots])

    def is_source_file(self, path: Path) -> bool:
        """
        True when ``path`` has a recognized extension and no excluded directory
        between its workspace root and itself.
        """
        path = normalize_path(path)
        if not path.name.endswith(tuple(self.config.extensions)):
            return False
        parents = path.parts[:-1]
        for root in self.roots:
            if path.is_relative_to(root):
                parents = path.relative_to(root).parts[:-1]
                break
        return not any(part in self.config.exclude for part in parents)

    async def discover_all(self) -> None:
        """Discovers every source file under every workspace root."""
        log.info("Discovering tests", roots=[str(r) for r in self.roots], emoji_key="scan")
        for root in self.roots:
            try:
                files = await asyncio.to_thread(
                    list_source_files, root, self.config.extensions, self.config.exclude
                )
            except EnumerationFailure as e:
                log.error("Failed to enumerate workspace root", root=str(root), error=str(e))
                continue

            log.debug("Enumerated source files", root=str(root), count=len(files))
            for path in files:
                await self.discover_in_file(path)

        log.info("Discovery complete", suites=len(self.tree), tests=self.tree.test_count)

    async def discover_in_file(self, path: Path) -> None:
        """
        Reads one document and adds its suites and tests to the tree.

        A read failure is logged and leaves the tree untouched. Callers that
        want a refresh rather than an addition must evict the document first.
        """
        path = normalize_path(path)
        file_log = log.bind(path=str(path))
        try:
            content = await self.reader.read(path)
        except ReadFailure as e:
            file_log.error("Failed to read source file", error=str(e), emoji_key="read")
            return

        events = list(scan_markers(content))

        current: PlunitSuite | None = None
        suites = tests = 0
        for event in events:
            if isinstance(event, SuiteBegin):
                current = self._add_suite(path, event.name, event.line)
                if current is not None:
                    suites += 1
            elif isinstance(event, SuiteEnd):
                current = None
            elif isinstance(event, TestCase):
                if current is not None and self._add_test(current, path, event.name, event.line):
                    tests += 1
            elif isinstance(event, ScanWarning):
                file_log.warning(event.message, line=event.line + 1, text=event.text.strip(), emoji_key="scan")

        file_log.debug("Discovered tests in file", suites=suites, tests=tests)

    def _add_suite(self, path: Path, name: str, line: int) -> PlunitSuite | None:
        key = SuiteKey(path, name)
        try:
            return self.tree.add_suite(key, name, path, line)
        except DuplicateKeyError:
            if self.config.duplicate_policy == "skip":
                log.warning("Duplicate suite skipped", path=str(path), suite=name, line=line + 1)
                return None

        for n in itertools.count(2):
            try:
                suite = self.tree.add_suite(SuiteKey(path, f"{name}#{n}"), name, path, line)
            except DuplicateKeyError:
                continue
            log.warning("Duplicate suite disambiguated", path=str(path), suite=name, id=suite.id)
            return suite

    def _add_test(self, suite: PlunitSuite, path: Path, name: str, line: int) -> bool:
        try:
            self.tree.add_test(suite, name, path, line)
            return True
        except DuplicateKeyError:
            if self.config.duplicate_policy == "skip":
                log.warning("Duplicate test skipped", path=str(path), test=name, line=line + 1)
                return False

        for n in itertools.count(2):
            try:
                test = self.tree.add_test(suite, name, path, line, key=TestKey(path, f"{name}#{n}"))
            except DuplicateKeyError:
                continue
            log.warning("Duplicate test disambiguated", path=str(path), test=name, id=test.id)
            return True


# 🔼⚙️
