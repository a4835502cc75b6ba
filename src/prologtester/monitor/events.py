# src/prologtester/monitor/events.py

"""
Filesystem events handed from the watchdog thread to the asyncio loop.
"""

from pathlib import Path

from attrs import define, field


@define(frozen=True, slots=True)
class MonitoredEvent:
    """A change to a source file under a watched root."""
    event_type: str  # created | modified | deleted | moved
    src_path: Path
    is_directory: bool = False
    dest_path: Path | None = field(default=None)

# 🔼⚙️
