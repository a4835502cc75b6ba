#
# src/prologtester/monitor/__init__.py
#
"""
Filesystem monitoring sub-package for prologtester.
"""
from .events import MonitoredEvent
from .service import MonitoringService, SourceEventHandler

__all__ = ["MonitoredEvent", "MonitoringService", "SourceEventHandler"]

# 🔼⚙️
