"""Utility functions for hypermod-action."""

from hypermod_action.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
