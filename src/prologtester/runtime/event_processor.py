# src/prologtester/runtime/event_processor.py
"""
Consumes filesystem events, debounces them, and keeps the test tree live.
"""
import asyncio
from pathlib import Path

import structlog

from prologtester.monitor import MonitoredEvent
from prologtester.runtime.controller import TestController
from prologtester.telemetry import StructLogger
from prologtester.tree import normalize_path

log: StructLogger = structlog.get_logger("runtime.event_processor")
# Debounce delay to group rapid file system events (e.g., editor save = truncate + write).
DEBOUNCE_DELAY = 0.25  # 250 milliseconds


class EventProcessor:
    """Turns monitored events into reconciliations and optional re-runs."""

    def __init__(
        self,
        controller: TestController,
        event_queue: asyncio.Queue[MonitoredEvent],
        shutdown_event: asyncio.Event,
        run_on_change: bool = False,
        cancel_event: asyncio.Event | None = None,
    ):
        self.controller = controller
        self.event_queue = event_queue
        self.shutdown_event = shutdown_event
        self.run_on_change = run_on_change
        self.cancel_event = cancel_event
        self._timers: dict[Path, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()
        # One interpreter at a time, even when several documents change together.
        self._run_lock = asyncio.Lock()
        log.debug("EventProcessor initialized.", run_on_change=run_on_change)

    async def run(self) -> None:
        """Main event consumption loop."""
        log.info("Event processor is running.")

        while not self.shutdown_event.is_set():
            try:
                get_task = asyncio.create_task(self.event_queue.get())
                shutdown_task = asyncio.create_task(self.shutdown_event.wait())
                done, _ = await asyncio.wait(
                    {get_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
                )

                if shutdown_task in done:
                    get_task.cancel()
                    break

                event = get_task.result()
                shutdown_task.cancel()
                self.handle_event(event)

            except asyncio.CancelledError:
                log.info("Event processor run loop cancelled.")
                break
            except Exception:
                log.exception("Error in event processor loop.")

        await self.stop()
        log.info("Event processor has stopped.")

    def handle_event(self, event: MonitoredEvent) -> None:
        """Routes one event; document-level work is debounced per path."""
        log.debug("Filesystem event", type=event.event_type, path=str(event.src_path))

        if event.is_directory:
            self._spawn(self.controller.reload_tests())
            return

        if event.event_type == "deleted":
            self._cancel_timer(event.src_path)
            self.controller.on_document_deleted(event.src_path)
        elif event.event_type == "moved":
            self._cancel_timer(event.src_path)
            self.controller.on_document_deleted(event.src_path)
            if event.dest_path is not None:
                self._debounce(event.dest_path)
        else:
            self._debounce(event.src_path)

    def _debounce(self, path: Path) -> None:
        self._cancel_timer(path)
        loop = asyncio.get_running_loop()
        self._timers[path] = loop.call_later(DEBOUNCE_DELAY, self._fire, path)

    def _cancel_timer(self, path: Path) -> None:
        handle = self._timers.pop(path, None)
        if handle is not None:
            handle.cancel()

    def _fire(self, path: Path) -> None:
        self._timers.pop(path, None)
        self._spawn(self._refresh(path))

    async def _refresh(self, path: Path) -> None:
        await self.controller.on_document_changed(path)
        if not self.run_on_change or not self.controller.tree.suites_for(normalize_path(path)):
            return
        async with self._run_lock:
            log.info("Re-running tests for changed document", path=str(path), emoji_key="run")
            await self.controller.run_document(path, self.cancel_event)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.error("Background refresh failed", error=str(task.exception()))

    async def stop(self) -> None:
        """Cancels pending timers and waits for in-flight work."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        if not self._tasks:
            return
        log.debug("Stopping in-flight tasks", count=len(self._tasks))
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)

# 🔼⚙️
