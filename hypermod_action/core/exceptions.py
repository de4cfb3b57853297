"""Custom exceptions for hypermod-action."""

from typing import Any


class HypermodError(Exception):
    """Base exception for hypermod-action.

    Anything raised as a ``HypermodError`` is fatal to the run.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(HypermodError):
    """A required credential or input is missing."""

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Missing required configuration: {', '.join(missing)}",
            {"missing": missing},
        )
        self.missing = missing


class DeploymentFetchError(HypermodError):
    """The deployment could not be fetched or parsed."""

    def __init__(self, message: str, status_code: int | None = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"Deployment not found or invalid: {message}", details)
        self.status_code = status_code


class ToolingError(HypermodError):
    """Installing the CLI toolchain or project dependencies failed."""

    def __init__(self, step: str, exit_code: int, stderr: str = ""):
        super().__init__(
            f"{step} failed with exit code {exit_code}",
            {"step": step, "exit_code": exit_code, "stderr": stderr},
        )
        self.step = step
        self.exit_code = exit_code
        self.stderr = stderr


class GitCommandError(HypermodError):
    """A git invocation exited non-zero."""

    def __init__(self, args: list[str], exit_code: int, stderr: str = ""):
        super().__init__(
            f"git {' '.join(args)} failed with exit code {exit_code}",
            {"exit_code": exit_code, "stderr": stderr},
        )
        self.git_args = args
        self.exit_code = exit_code
        self.stderr = stderr


class GitHubAPIError(HypermodError):
    """The pull request service returned an unexpected response."""

    def __init__(self, message: str, status_code: int | None = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class RateLimitExceededError(GitHubAPIError):
    """Rate limiting persisted past the retry budget."""

    def __init__(self, method: str, url: str, attempts: int):
        super().__init__(
            f"Rate limit exceeded for {method} {url} after {attempts} attempts",
            status_code=None,
        )
        self.details.update({"method": method, "url": url, "attempts": attempts})
        self.attempts = attempts


class ReconciliationError(HypermodError):
    """The branch/pull request could not be reconciled."""

    def __init__(self, phase: str, message: str):
        super().__init__(
            f"Reconciliation failed in phase '{phase}': {message}",
            {"phase": phase},
        )
        self.phase = phase
