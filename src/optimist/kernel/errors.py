"""
Custom exceptions for optimist

A small, well-defined error hierarchy. Errors raised inside the engine are
caught at the reconciliation boundary and reported as diagnostics - the
wrapped reducer never sees them and neither does the host loop.

Fun fact: The phrase "optimistic concurrency" was coined by H.T. Kung and
John Robinson in 1981 - assume nothing will go wrong, then check afterwards.
"""

from collections.abc import Hashable


class OptimistError(Exception):
    """Base exception for all optimist errors"""

    pass


class ResolutionNotFound(OptimistError):
    """
    Raised when a commit or revert targets a transaction id absent from history

    Usually means the transaction was already resolved, or its BEGIN was
    never dispatched through this wrapper.
    """

    def __init__(self, txn_id: Hashable, operation: str) -> None:
        self.txn_id = txn_id
        self.operation = operation
        super().__init__(
            f"Failed {operation}. Transaction #{txn_id} does not exist!"
        )
