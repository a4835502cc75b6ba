#
# config/__init__.py
#
"""
Configuration handling sub-package for prologtester.

Exports the loading function and core configuration model.
"""

from .loader import DEFAULT_CONFIG_NAME, load_config, parse_config
from .models import (
    DiscoveryConfig,
    GlobalConfig,
    InterpreterConfig,
    ProjectConfig,
    WorkspaceConfig,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DiscoveryConfig",
    "GlobalConfig",
    "InterpreterConfig",
    "ProjectConfig",
    "WorkspaceConfig",
    "load_config",
    "parse_config",
]

# 🔼⚙️
