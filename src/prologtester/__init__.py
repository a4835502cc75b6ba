#
# src/prologtester/__init__.py
#
"""
prologtester: discover and run SWI-Prolog plunit tests from the command line.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("prologtester")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

# 🔼⚙️
