# tests/unit/test_event_processor.py

"""Tests for routing and debouncing of filesystem events in watch mode."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from prologtester.exceptions import PrologTesterError
from prologtester.monitor import MonitoredEvent
from prologtester.runtime import event_processor as ep_module
from prologtester.runtime.event_processor import EventProcessor


@pytest.fixture
def controller() -> MagicMock:
    controller = MagicMock()
    controller.on_document_changed = AsyncMock()
    controller.reload_tests = AsyncMock()
    controller.run_document = AsyncMock()
    controller.tree.suites_for.return_value = []
    return controller


@pytest.fixture(autouse=True)
def fast_debounce():
    with patch.object(ep_module, "DEBOUNCE_DELAY", 0.01):
        yield


def _processor(controller, run_on_change=False) -> EventProcessor:
    return EventProcessor(controller, asyncio.Queue(), asyncio.Event(), run_on_change=run_on_change)


@pytest.mark.asyncio
class TestEventRouting:
    async def test_modified_events_are_debounced_per_path(self, controller: MagicMock):
        processor = _processor(controller)
        path = Path("/w/a.pl")

        for _ in range(3):
            processor.handle_event(MonitoredEvent("modified", path))
        await asyncio.sleep(0.05)
        await processor.stop()

        controller.on_document_changed.assert_awaited_once_with(path)

    async def test_deleted_event_forgets_document(self, controller: MagicMock):
        processor = _processor(controller)
        path = Path("/w/a.pl")
        processor.handle_event(MonitoredEvent("modified", path))
        processor.handle_event(MonitoredEvent("deleted", path))
        await asyncio.sleep(0.05)

        controller.on_document_deleted.assert_called_once_with(path)
        controller.on_document_changed.assert_not_awaited()

    async def test_moved_event_forgets_source_and_refreshes_destination(self, controller: MagicMock):
        processor = _processor(controller)
        src, dest = Path("/w/a.pl"), Path("/w/b.pl")
        processor.handle_event(MonitoredEvent("moved", src, dest_path=dest))
        await asyncio.sleep(0.05)

        controller.on_document_deleted.assert_called_once_with(src)
        controller.on_document_changed.assert_awaited_once_with(dest)

    async def test_directory_event_reloads_everything(self, controller: MagicMock):
        processor = _processor(controller)
        processor.handle_event(MonitoredEvent("deleted", Path("/w/sub"), is_directory=True))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        controller.reload_tests.assert_awaited_once()
        controller.on_document_deleted.assert_not_called()

    async def test_run_on_change_reruns_document(self, controller: MagicMock):
        controller.tree.suites_for.return_value = [MagicMock()]
        processor = _processor(controller, run_on_change=True)
        path = Path("/w/a.pl")
        processor.handle_event(MonitoredEvent("modified", path))
        await asyncio.sleep(0.05)

        controller.run_document.assert_awaited_once_with(path, None)

    async def test_no_rerun_when_document_has_no_suites(self, controller: MagicMock):
        processor = _processor(controller, run_on_change=True)
        processor.handle_event(MonitoredEvent("created", Path("/w/empty.pl")))
        await asyncio.sleep(0.05)

        controller.on_document_changed.assert_awaited_once()
        controller.run_document.assert_not_awaited()


@pytest.mark.asyncio
class TestEventLoop:
    async def test_run_consumes_queue_until_shutdown(self, controller: MagicMock):
        processor = _processor(controller)
        task = asyncio.create_task(processor.run())
        await processor.event_queue.put(MonitoredEvent("created", Path("/w/new.pl")))
        await asyncio.sleep(0.05)

        processor.shutdown_event.set()
        await asyncio.wait_for(task, timeout=1)

        controller.on_document_changed.assert_awaited_once_with(Path("/w/new.pl"))

    async def test_stop_cancels_pending_timers(self, controller: MagicMock):
        processor = _processor(controller)
        processor.handle_event(MonitoredEvent("modified", Path("/w/a.pl")))
        await processor.stop()
        await asyncio.sleep(0.05)

        controller.on_document_changed.assert_not_awaited()

    async def test_failed_reload_is_logged(self, controller: MagicMock):
        controller.reload_tests = AsyncMock(side_effect=PrologTesterError("TestController has been disposed"))
        processor = _processor(controller)

        with patch.object(ep_module, "log") as mock_log:
            processor.handle_event(MonitoredEvent("modified", Path("/w/sub"), is_directory=True))
            await asyncio.sleep(0.01)

        mock_log.error.assert_called_once_with("Background refresh failed", error="TestController has been disposed")
        assert not processor._tasks
