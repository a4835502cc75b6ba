# src/prologtester/runtime/controller.py

"""
Host-facing service object that wires discovery, execution and reconciliation.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

import structlog

from prologtester.config import ProjectConfig
from prologtester.discovery.engine import DiscoveryEngine, FileSourceReader, SourceReader
from prologtester.exceptions import PrologTesterError
from prologtester.execution.engine import ExecutionEngine
from prologtester.execution.factory import get_interpreter_runner
from prologtester.execution.models import AllTests, RunReport, RunScope, SingleSuite, SingleTest
from prologtester.execution.protocols import InterpreterRunner, RunNotifier
from prologtester.runtime.reconciler import ChangeReconciler
from prologtester.telemetry import StructLogger
from prologtester.tree import PlunitSuite, PlunitTest, TestTree, TreeItem, normalize_path

log: StructLogger = structlog.get_logger("runtime.controller")

Disposable = Callable[[], Awaitable[None] | None]


class TestController:
    """
    One controller per host session; collaborators are injected so that
    the reader, the interpreter and the progress sink can be swapped out.
    """

    __test__ = False

    def __init__(
        self,
        config: ProjectConfig,
        reader: SourceReader | None = None,
        runner: InterpreterRunner | None = None,
        notifier: RunNotifier | None = None,
    ):
        self.config = config
        self.tree = TestTree()
        self.discovery = DiscoveryEngine(
            self.tree,
            config.discovery,
            config.workspace.roots,
            reader or FileSourceReader(config.interpreter.encoding),
        )
        self.engine = ExecutionEngine(
            self.tree,
            runner or get_interpreter_runner(config.interpreter),
            notifier,
            config.interpreter,
        )
        # Full scans and per-document reconciliations never interleave.
        self._discovery_lock = asyncio.Lock()
        self.reconciler = ChangeReconciler(self.tree, self.discovery, self._discovery_lock)
        self._resolved = False
        self._disposed = False
        self._subscriptions: list[Disposable] = []
        log.debug("TestController initialized.", roots=[str(r) for r in config.workspace.roots])

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    async def resolve(self, node: TreeItem | None = None) -> None:
        """
        Populates children of ``node``.

        The root (``None``) triggers full discovery on its first expansion.
        Suites are filled at discovery time, so resolving one is a no-op.
        Anything reconciled before the first expansion is replaced, so each
        document appears once.
        """
        self._check_alive()
        if node is None:
            async with self._discovery_lock:
                if not self._resolved:
                    self.tree.clear()
                    await self.discovery.discover_all()
                    self._resolved = True
            return
        log.debug("Children already resolved", item=node.id)

    async def reload_tests(self) -> None:
        """Discards the whole tree and rediscovers every workspace root."""
        self._check_alive()
        await self.reconciler.wait_idle()
        async with self._discovery_lock:
            self.tree.clear()
            await self.discovery.discover_all()
            self._resolved = True

    async def run(
        self,
        include: Sequence[TreeItem] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> RunReport:
        """
        Runs the requested items, or every test when ``include`` is empty.

        Pending reconciliations finish first; items are re-read from the tree
        by identifier so stale references from before an edit still work.
        """
        self._check_alive()
        await self.reconciler.wait_idle()
        if not self._resolved:
            await self.resolve(None)

        scopes: list[RunScope] = []
        if not include:
            scopes.append(AllTests())
        for item in include or ():
            current = self.tree.get(item.id)
            if isinstance(current, PlunitSuite):
                scopes.append(SingleSuite(current))
            elif isinstance(current, PlunitTest):
                scopes.append(SingleTest(current))
            else:
                log.warning("Requested item is no longer in the tree", item=item.id)

        return await self.engine.run_many(scopes, cancel_event)

    async def run_document(self, path: Path, cancel_event: asyncio.Event | None = None) -> RunReport:
        """Runs every suite declared in ``path``."""
        self._check_alive()
        await self.reconciler.wait_idle()
        suites = self.tree.suites_for(normalize_path(path))
        return await self.engine.run_many([SingleSuite(s) for s in suites], cancel_event)

    async def on_document_changed(self, path: Path) -> None:
        """Change notification from the host; reconciles recognized sources."""
        self._check_alive()
        path = normalize_path(path)
        if not self.discovery.is_source_file(path):
            return
        await self.reconciler.schedule(path)

    def on_document_deleted(self, path: Path) -> None:
        self._check_alive()
        self.reconciler.forget(Path(path))

    def add_subscription(self, disposable: Disposable) -> None:
        """Registers a callback to run on dispose()."""
        self._subscriptions.append(disposable)

    async def dispose(self) -> None:
        """Releases subscriptions and drops the tree. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        for disposable in reversed(self._subscriptions):
            try:
                outcome = disposable()
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                log.error("Failed to release subscription", error=str(e), exc_info=True)
        self._subscriptions.clear()
        await self.reconciler.wait_idle()
        self.tree.clear()
        log.debug("TestController disposed.")

    def _check_alive(self) -> None:
        if self._disposed:
            raise PrologTesterError("TestController has been disposed")

# 🔼⚙️
