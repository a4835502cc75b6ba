# src/prologtester/telemetry/logger/processors.py

"""
Custom structlog processors used by the prologtester logging pipeline.
"""

import logging
from typing import Any

from structlog.typing import EventDict, WrappedLogger


def add_emoji_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Prefix the event message with an emoji.

    An explicit ``emoji_key=`` on the log call wins ("scan", "pass", ...),
    otherwise the level decides.
    """
    from prologtester.telemetry.logger.base import LOG_EMOJIS

    emoji_key: Any = event_dict.get("emoji_key")
    emoji = LOG_EMOJIS.get(emoji_key) if emoji_key else None
    if emoji is None:
        level_name = str(event_dict.get("level", method_name)).upper()
        emoji = LOG_EMOJIS.get(logging.getLevelName(level_name), LOG_EMOJIS["general"])

    event = event_dict.get("event")
    if isinstance(event, str) and not event.startswith(emoji):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Drop rendering hints before the event reaches a renderer."""
    event_dict.pop("emoji_key", None)
    return event_dict

# 🔼⚙️
