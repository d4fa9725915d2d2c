"""
Kernel - Logging, metrics and error infrastructure

Everything here is ambient: the reconciliation engine reports through it,
but none of it affects the states the engine computes.
"""

from optimist.kernel.errors import OptimistError, ResolutionNotFound
from optimist.kernel.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "OptimistError",
    "ResolutionNotFound",
    # Logging
    "configure_logging",
    "get_logger",
]
