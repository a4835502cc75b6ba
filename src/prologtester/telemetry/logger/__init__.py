#
# src/prologtester/telemetry/logger/__init__.py
#
from .base import LOG_EMOJIS, StructLogger, make_console, setup_logging

__all__ = ["LOG_EMOJIS", "StructLogger", "make_console", "setup_logging"]

# 🔼⚙️
