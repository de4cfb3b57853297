"""Core functionality for hypermod-action."""

from hypermod_action.core.exceptions import (
    ConfigurationError,
    DeploymentFetchError,
    GitCommandError,
    GitHubAPIError,
    HypermodError,
    RateLimitExceededError,
    ReconciliationError,
    ToolingError,
)

__all__ = [
    "HypermodError",
    "ConfigurationError",
    "DeploymentFetchError",
    "ToolingError",
    "GitCommandError",
    "GitHubAPIError",
    "RateLimitExceededError",
    "ReconciliationError",
]
