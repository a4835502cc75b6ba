# src/prologtester/runtime/orchestrator.py

"""
High-level coordinator for the prologtester watch process.
Manages lifecycle of all runtime components.
"""

import asyncio

import structlog

from prologtester.monitor import MonitoredEvent, MonitoringService
from prologtester.runtime.controller import TestController
from prologtester.runtime.event_processor import EventProcessor
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.orchestrator")


class WatchOrchestrator:
    """Discovers, monitors and reconciles until shutdown is requested."""

    def __init__(
        self,
        controller: TestController,
        shutdown_event: asyncio.Event,
        run_on_change: bool = False,
    ):
        self.controller = controller
        self.shutdown_event = shutdown_event
        self.run_on_change = run_on_change
        self.event_queue: asyncio.Queue[MonitoredEvent] = asyncio.Queue()
        self.monitor_service: MonitoringService | None = None
        self.event_processor: EventProcessor | None = None

    async def run(self) -> None:
        """Main execution method: setup, run, and cleanup."""
        log.info("Orchestrator run sequence starting.")
        processor_task = None

        try:
            await self.controller.resolve(None)
            log.info(
                "Initial discovery finished",
                suites=len(self.controller.tree),
                tests=self.controller.tree.test_count,
            )

            self.event_processor = EventProcessor(
                self.controller,
                self.event_queue,
                self.shutdown_event,
                run_on_change=self.run_on_change,
            )

            self.monitor_service = self._setup_monitoring()
            if self.monitor_service:
                try:
                    self.monitor_service.start()
                    self.controller.add_subscription(self.monitor_service.stop)
                except Exception as e:
                    log.critical("Failed to start filesystem monitoring service", error=str(e), exc_info=True)
                    return

            log.info("Starting event processor task.")
            processor_task = asyncio.create_task(self.event_processor.run())
            await processor_task

        except asyncio.CancelledError:
            log.warning("Orchestrator task was cancelled.")
        except Exception:
            log.critical("Orchestrator run failed with an unhandled exception.", exc_info=True)
        finally:
            log.info("Orchestrator entering cleanup phase.")
            if processor_task and not processor_task.done():
                processor_task.cancel()
            if self.monitor_service and self.monitor_service.is_running:
                await self.monitor_service.stop()
            await self.controller.dispose()
            log.info("Orchestrator cleanup complete.")

    def _setup_monitoring(self) -> MonitoringService | None:
        roots = [root for root in self.controller.config.workspace.roots if root.is_dir()]
        if not roots:
            log.warning("No existing workspace roots to watch.")
            return None

        loop = asyncio.get_running_loop()
        service = MonitoringService(self.event_queue)
        for root in roots:
            try:
                service.add_root(root, loop, self.controller.discovery.is_source_file)
            except OSError as e:
                log.error("Failed to watch workspace root", root=str(root), error=str(e))
        return service

# 🔼⚙️
