#
# src/prologtester/execution/factory.py
#
"""
Factory for creating InterpreterRunner instances.
"""
import structlog

from prologtester.config.models import InterpreterConfig
from prologtester.exceptions import ConfigurationError
from prologtester.execution.protocols import InterpreterRunner
from prologtester.execution.subprocess_runner import SubprocessInterpreterRunner

log = structlog.get_logger("execution.factory")

RUNNER_MAP = {
    "swipl": SubprocessInterpreterRunner,
    "subprocess": SubprocessInterpreterRunner,  # A generic alias
}


def get_interpreter_runner(config: InterpreterConfig, runner_name: str = "subprocess") -> InterpreterRunner:
    """
    Factory function to get an instance of an InterpreterRunner.
    """
    runner_key = runner_name.lower()
    runner_class = RUNNER_MAP.get(runner_key)

    if not runner_class:
        log.error("Unsupported interpreter runner specified", runner=runner_name)
        raise ConfigurationError(
            f"Unsupported interpreter runner: '{runner_name}'. "
            f"Available runners: {list(RUNNER_MAP.keys())}"
        )

    log.debug("Instantiating interpreter runner", runner=runner_name, executable=config.executable)
    return runner_class(config)

# 🔼⚙️
