#
# src/prologtester/runtime/__init__.py
#
"""
Runtime components: the host-facing controller, reconciliation and watch loop.
"""
from .controller import TestController
from .reconciler import ChangeReconciler

__all__ = ["ChangeReconciler", "TestController"]

# 🔼⚙️
