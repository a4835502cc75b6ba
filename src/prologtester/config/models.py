#
# config/models.py
#
"""
Attrs-based data models for prologtester configuration structure.
"""

import logging
from pathlib import Path
from typing import Any

from attrs import define, field

DUPLICATE_POLICIES = ("disambiguate", "skip")


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_extensions(inst: Any, attr: Any, value: tuple[str, ...]) -> None:
    """Every extension must be a non-empty string starting with a dot."""
    if not value:
        raise ValueError(f"Field '{attr.name}' must list at least one extension")
    for ext in value:
        if not isinstance(ext, str) or not ext.startswith(".") or len(ext) < 2:
            raise ValueError(f"Invalid extension '{ext}' in '{attr.name}'; expected e.g. '.pl'")


def _validate_duplicate_policy(inst: Any, attr: Any, value: str) -> None:
    if value not in DUPLICATE_POLICIES:
        raise ValueError(f"Invalid duplicate_policy '{value}'. Must be one of {list(DUPLICATE_POLICIES)}.")


def _validate_timeout(inst: Any, attr: Any, value: float | None) -> None:
    """Timeout is seconds; None (or 0 in the file) disables it."""
    if value is not None and value <= 0:
        raise ValueError(f"Field '{attr.name}' must be positive or disabled, got {value}")


def _to_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


# --- Section models ---
@define(frozen=True, slots=True)
class DiscoveryConfig:
    """Which files are scanned and how identifier collisions are resolved."""
    extensions: tuple[str, ...] = field(default=(".pl",), converter=_to_tuple, validator=_validate_extensions)
    exclude: tuple[str, ...] = field(
        default=("node_modules", ".git", ".venv", "venv", "__pycache__"),
        converter=_to_tuple,
    )
    duplicate_policy: str = field(default="disambiguate", validator=_validate_duplicate_policy)


@define(frozen=True, slots=True)
class InterpreterConfig:
    """How the external Prolog interpreter is launched for a single test."""
    executable: str = field(default="swipl")
    extra_args: tuple[str, ...] = field(factory=tuple, converter=_to_tuple)
    timeout: float | None = field(default=120.0, validator=_validate_timeout)
    encoding: str = field(default="utf-8")
    # Exit status is not authoritative by default; output classification decides.
    strict_exit_code: bool = field(default=False)


@define(frozen=True, slots=True)
class WorkspaceConfig:
    """Workspace roots scanned by full discovery."""
    roots: tuple[Path, ...] = field(factory=lambda: (Path("."),), converter=lambda v: tuple(Path(p) for p in _to_tuple(v)))


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for prologtester."""
    log_level: str = field(default="INFO", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


@define(frozen=True, slots=True)
class ProjectConfig:
    """Root configuration object for the prologtester application."""
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    workspace: WorkspaceConfig = field(factory=WorkspaceConfig)
    discovery: DiscoveryConfig = field(factory=DiscoveryConfig)
    interpreter: InterpreterConfig = field(factory=InterpreterConfig)
    config_file_path: Path | None = field(default=None)


# 🔼⚙️
