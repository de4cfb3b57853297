"""Command planning and execution models."""

from pydantic import BaseModel, ConfigDict, Field


class PlannedCommand(BaseModel):
    """A fully substituted shell command ready to run."""

    model_config = ConfigDict(frozen=True)

    command: str
    source: str
    index: int


class CommandResult(BaseModel):
    """Outcome of running one planned command."""

    command: str
    source: str = ""
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class ExecutionReport(BaseModel):
    """Ordered results of a plan; the verdict is derived after the loop."""

    results: list[CommandResult] = Field(default_factory=list)

    @property
    def failures(self) -> list[CommandResult]:
        return [result for result in self.results if not result.succeeded]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def last_error(self) -> str | None:
        """Stderr of the last failed command, if any."""
        failures = self.failures
        if not failures:
            return None
        last = failures[-1]
        return last.stderr.strip() or f"exit code {last.exit_code}"
