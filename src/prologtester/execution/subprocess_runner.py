#
# src/prologtester/execution/subprocess_runner.py
#
"""
Launches the Prolog interpreter for a single goal using asyncio.subprocess.
"""
import asyncio
import contextlib
from pathlib import Path

import structlog

from prologtester.config.models import InterpreterConfig
from prologtester.exceptions import ProcessFailure
from prologtester.execution.protocols import InterpreterResult, InterpreterRunner
from prologtester.telemetry import StructLogger

log: StructLogger = structlog.get_logger("execution.runner")


class SubprocessInterpreterRunner(InterpreterRunner):
    """
    Implements the InterpreterRunner protocol by spawning ``swipl`` (or the
    configured executable) once per goal.
    """
    def __init__(self, config: InterpreterConfig | None = None):
        self.config = config or InterpreterConfig()

    def build_command(self, source_path: Path, goal: str) -> list[str]:
        return [
            self.config.executable,
            *self.config.extra_args,
            "-s",
            str(source_path),
            "-g",
            goal,
        ]

    async def run_goal(self, source_path: Path, goal: str) -> InterpreterResult:
        """
        Executes the goal and waits for the process to exit.

        Output is captured in full before returning; there is no streaming.
        """
        command = self.build_command(source_path, goal)
        runner_log = log.bind(command=" ".join(command))
        runner_log.debug("Launching interpreter", emoji_key="run")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=source_path.parent,
            )
        except FileNotFoundError as e:
            runner_log.error("Interpreter not found", executable=self.config.executable)
            raise ProcessFailure(
                f"Interpreter not found: '{self.config.executable}'. Is it installed and in the system's PATH?",
                command,
                e,
            ) from e
        except OSError as e:
            runner_log.error("Failed to launch interpreter", error=str(e))
            raise ProcessFailure(f"Failed to launch interpreter: {e}", command, e) from e

        try:
            output_bytes, _ = await asyncio.wait_for(process.communicate(), timeout=self.config.timeout)
        except TimeoutError:
            await self._kill(process)
            runner_log.warning("Interpreter timed out", timeout=self.config.timeout)
            raise ProcessFailure(
                f"Interpreter timed out after {self.config.timeout:g} seconds", command
            ) from None
        except asyncio.CancelledError:
            runner_log.warning("Run cancelled; killing interpreter")
            await self._kill(process)
            raise

        exit_code = process.returncode if process.returncode is not None else -1
        output = output_bytes.decode(self.config.encoding, errors="replace")

        if exit_code < 0:
            runner_log.warning("Interpreter terminated by signal", signal=-exit_code)
            raise ProcessFailure(f"Interpreter terminated by signal {-exit_code}", command)

        runner_log.debug("Interpreter finished", exit_code=exit_code, output_len=len(output))
        return InterpreterResult(exit_code=exit_code, output=output, command=tuple(command))

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        # Reap even if the caller is being cancelled again.
        await asyncio.shield(process.wait())

# 🔼⚙️
