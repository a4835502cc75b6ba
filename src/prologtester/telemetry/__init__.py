#
# src/prologtester/telemetry/__init__.py
#
"""
Logging setup for prologtester.
"""
from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
