# src/prologtester/telemetry/logger/base.py

import logging
import sys

import structlog
from rich.console import Console
from structlog.typing import FilteringBoundLogger

from prologtester.telemetry.logger.processors import (
    add_emoji_processor,
    remove_extra_keys_processor,
)

BASE_LOGGER_NAME = "prologtester"
LOG_EMOJIS = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "scan": "🔎",
    "read": "📄",
    "run": "▶️",
    "pass": "✅",
    "fail": "🚫",
    "path": "📁",
    "general": "➡️",
}

_JSON_RENDERER = structlog.processors.JSONRenderer(sort_keys=True)


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_emoji_processor,
            remove_extra_keys_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _console_handler(json_logs: bool) -> logging.Handler:
    # stderr only: stdout carries the tree, verdicts and summary.
    renderer = _JSON_RENDERER if json_logs else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer))
    return handler


def _file_handler(log_file: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=_JSON_RENDERER))
    handler.setLevel(level)
    return handler


def setup_logging(
    level: int = logging.INFO,
    json_logs: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configures structlog and the stdlib root logger.

    Safe to call again: CLI subcommands reconfigure once the config file's
    log level is known, and existing root handlers are replaced.
    """
    _configure_structlog()

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    slog = structlog.get_logger(BASE_LOGGER_NAME)

    root_logger.addHandler(_console_handler(json_logs))

    if log_file:
        try:
            root_logger.addHandler(_file_handler(log_file, level))
        except OSError as e:
            slog.error("Failed to set up file logging", log_file=log_file, error=str(e))
        else:
            slog.debug("File logging enabled", log_file=log_file, emoji_key="path")

    slog.debug(
        "Logging configured",
        log_level=logging.getLevelName(level),
        json_console_format=json_logs,
        log_file=log_file or "None",
    )


def make_console() -> Console:
    """Console for human-facing output: the tree, verdict lines and summary."""
    return Console(file=sys.stdout, highlight=False)


StructLogger = FilteringBoundLogger

# 🔼⚙️
