# src/prologtester/runtime/reconciler.py
"""
Keeps the tree consistent with edited documents.
"""
import asyncio
from pathlib import Path

import structlog

from prologtester.discovery.engine import DiscoveryEngine
from prologtester.telemetry import StructLogger
from prologtester.tree import TestTree, normalize_path

log: StructLogger = structlog.get_logger("runtime.reconciler")


class ChangeReconciler:
    """
    Evicts a document's entries and rediscovers it.

    In-flight reconciliations are tracked so that a run request can wait
    for them before reading the tree.
    """

    def __init__(self, tree: TestTree, discovery: DiscoveryEngine, lock: asyncio.Lock | None = None):
        self.tree = tree
        self.discovery = discovery
        self._lock = lock or asyncio.Lock()
        self._tasks: dict[Path, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def reconcile(self, path: Path) -> None:
        path = normalize_path(path)
        async with self._lock:
            removed = self.tree.remove_all_for_document(path)
            log.debug("Reconciling document", path=str(path), evicted_suites=removed)
            await self.discovery.discover_in_file(path)

    def forget(self, path: Path) -> int:
        """Evicts a deleted document without rediscovering it."""
        removed = self.tree.remove_all_for_document(normalize_path(path))
        log.info("Document removed from tree", path=str(path), evicted_suites=removed)
        return removed

    def schedule(self, path: Path) -> asyncio.Task:
        """
        Starts a reconciliation for ``path`` as a task.

        A newer request for the same path runs after the previous one, so the
        final tree reflects the latest content.
        """
        path = normalize_path(path)
        previous = self._tasks.get(path)

        async def _run() -> None:
            if previous is not None and not previous.done():
                await asyncio.gather(previous, return_exceptions=True)
            await self.reconcile(path)

        task = asyncio.create_task(_run())
        self._tasks[path] = task
        task.add_done_callback(lambda t, p=path: self._on_done(p, t))
        return task

    async def wait_idle(self) -> None:
        """Waits until every scheduled reconciliation has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    def _on_done(self, path: Path, task: asyncio.Task) -> None:
        if self._tasks.get(path) is task:
            del self._tasks[path]
        if not task.cancelled() and task.exception() is not None:
            log.error("Reconciliation failed", path=str(path), error=str(task.exception()))

# 🔼⚙️
