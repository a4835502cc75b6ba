#
# src/prologtester/exceptions.py
#
"""
Exception hierarchy for prologtester.

Discovery and execution never let these escape a run: readers and runners
raise them, and the engines catch them at the point of occurrence.
"""

from pathlib import Path


class PrologTesterError(Exception):
    """Base class for all prologtester errors."""


class ConfigurationError(PrologTesterError):
    """Raised when the configuration file is missing, unparsable or invalid."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = path
        full_message = message
        if path:
            full_message += f" (Config: '{path}')"
        super().__init__(full_message)


class DuplicateKeyError(PrologTesterError):
    """Raised by the test tree when an identifier is already present."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Duplicate test tree identifier: '{item_id}'")


class ReadFailure(PrologTesterError):
    """A source document could not be read."""

    def __init__(self, path: Path | str, details: Exception | None = None):
        self.path = path
        self.details = details
        message = f"Failed to read source file '{path}'"
        if details:
            message += f": {details}"
        super().__init__(message)


class EnumerationFailure(PrologTesterError):
    """A workspace root could not be scanned for source files."""

    def __init__(self, root: Path | str, details: Exception | None = None):
        self.root = root
        self.details = details
        message = f"Failed to enumerate workspace root '{root}'"
        if details:
            message += f": {details}"
        super().__init__(message)


class ProcessFailure(PrologTesterError):
    """
    The interpreter could not be launched, was killed, or timed out.

    Converted into a failed verdict by the execution engine.
    """

    def __init__(self, message: str, command: list[str] | None = None, details: Exception | None = None):
        self.command = command
        self.details = details
        super().__init__(message)
        if details:
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class StateTransitionError(PrologTesterError):
    """Raised when a run session would record a second terminal verdict."""


# 🔼⚙️
