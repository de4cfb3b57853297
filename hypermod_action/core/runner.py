"""Execution runner.

Runs planned commands strictly in sequence. A failing command is recorded
and the remaining commands still run; failed commands are never retried.
"""

import asyncio
import time
from pathlib import Path

from hypermod_action.models.execution import CommandResult, ExecutionReport, PlannedCommand
from hypermod_action.utils.logging import get_logger

# Exit code recorded when the shell itself could not be started
SPAWN_FAILURE_EXIT_CODE = 127


class CommandRunner:
    """Runs shell commands as independent subprocesses."""

    def __init__(self, cwd: Path):
        self.cwd = cwd
        self.logger = get_logger("runner")

    async def run_all(self, commands: list[PlannedCommand]) -> ExecutionReport:
        """Run every command and collect the results in plan order."""
        report = ExecutionReport()

        for planned in commands:
            result = await self.run(planned)
            report.results.append(result)

        self.logger.info(
            "runner.completed",
            commands=len(report.results),
            failures=len(report.failures),
        )
        return report

    async def run(self, planned: PlannedCommand) -> CommandResult:
        """Run a single command, capturing exit code and output."""
        start_time = time.time()
        self.logger.info(
            "runner.command.started",
            cmd=planned.command,
            source=planned.source,
            cwd=str(self.cwd),
        )

        try:
            process = await asyncio.create_subprocess_shell(
                planned.command,
                cwd=str(self.cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
            exit_code = process.returncode or 0
        except OSError as e:
            stdout, stderr = b"", str(e).encode()
            exit_code = SPAWN_FAILURE_EXIT_CODE

        result = CommandResult(
            command=planned.command,
            source=planned.source,
            exit_code=exit_code,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else "",
            duration_ms=int((time.time() - start_time) * 1000),
        )

        if result.succeeded:
            self.logger.info(
                "runner.command.succeeded",
                cmd=planned.command,
                duration_ms=result.duration_ms,
            )
        else:
            self.logger.error(
                "runner.command.failed",
                cmd=planned.command,
                exit_code=result.exit_code,
                stderr=result.stderr[:1000],
            )

        return result
