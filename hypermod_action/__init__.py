"""hypermod-action: apply hypermod deployments as pull requests."""

__version__ = "0.1.0"
