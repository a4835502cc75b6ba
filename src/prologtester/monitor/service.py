# src/prologtester/monitor/service.py

"""
Watches workspace roots with watchdog and queues source-file events.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from prologtester.monitor.events import MonitoredEvent
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("monitor.service")

WATCHED_EVENT_TYPES = ("created", "modified", "deleted", "moved")


class SourceEventHandler(FileSystemEventHandler):
    """
    Runs on the observer thread; forwards matching events to the loop's queue.
    """

    def __init__(
        self,
        event_queue: asyncio.Queue[MonitoredEvent],
        loop: asyncio.AbstractEventLoop,
        accept: Callable[[Path], bool],
    ):
        super().__init__()
        self._queue = event_queue
        self._loop = loop
        self._accept = accept

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in WATCHED_EVENT_TYPES:
            return

        src_path = Path(str(event.src_path))
        dest_raw = getattr(event, "dest_path", "")
        dest_path = Path(str(dest_raw)) if dest_raw else None

        # Directory moves/deletes can drop many documents at once, so they pass through.
        if not event.is_directory:
            relevant = self._accept(src_path) or (dest_path is not None and self._accept(dest_path))
            if not relevant:
                return
        elif event.event_type not in ("moved", "deleted"):
            return

        monitored = MonitoredEvent(
            event_type=event.event_type,
            src_path=src_path,
            is_directory=event.is_directory,
            dest_path=dest_path,
        )
        self._loop.call_soon_threadsafe(self._queue.put_nowait, monitored)


class MonitoringService:
    """Owns the watchdog observer for all workspace roots."""

    def __init__(self, event_queue: asyncio.Queue[MonitoredEvent]):
        self.event_queue = event_queue
        self._observer: Observer | None = None
        self._roots: list[Path] = []

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def add_root(self, root: Path, loop: asyncio.AbstractEventLoop, accept: Callable[[Path], bool]) -> None:
        if self._observer is None:
            self._observer = Observer()
        handler = SourceEventHandler(self.event_queue, loop, accept)
        self._observer.schedule(handler, str(root), recursive=True)
        self._roots.append(root)
        log.info("Watching workspace root", root=str(root), emoji_key="path")

    def start(self) -> None:
        if self._observer is None:
            log.warning("No workspace roots scheduled; monitor not started.")
            return
        self._observer.start()
        log.debug("Filesystem observer started", roots=len(self._roots))

    async def stop(self) -> None:
        if self._observer is None:
            return
        observer, self._observer = self._observer, None
        if observer.is_alive():
            observer.stop()
            await asyncio.to_thread(observer.join)
        log.debug("Filesystem observer stopped")

# 🔼⚙️
