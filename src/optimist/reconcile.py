"""
Reconciliation Engine - commit and revert over the speculative history

The history is a clean/pending state machine: empty (clean) or non-empty with
a before_state snapshot (pending). Commit and revert only ever drop prefixes,
delete a single entry, or clear an entry's pending id - entries are never
reordered.

Commit and revert are deliberately asymmetric. A committed action's effect is
real, so a committed entry in the middle of the log stays as an inert,
resolved entry that later replays still fold through. A reverted action's
effect must vanish, so its entry is physically removed.
"""

from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any

from optimist.kernel.errors import ResolutionNotFound
from optimist.kernel.logging import get_logger
from optimist.kernel.metrics import resolution_not_found_total, transactions_total
from optimist.models import LogEntry, WrappedState

logger = get_logger(__name__)

Reducer = Callable[[Any, Any], Any]


def fold(reducer: Reducer, state: Any, entries: Iterable[LogEntry]) -> Any:
    """Fold entry actions left-to-right through the reducer"""
    for entry in entries:
        state = reducer(state, entry.action)
    return state


def next_pending_index(entries: Sequence[LogEntry]) -> int | None:
    """Index of the first entry still awaiting commit/revert, or None"""
    for index, entry in enumerate(entries):
        if entry.is_pending:
            return index
    return None


def locate(history: Sequence[LogEntry], txn_id: Hashable, operation: str) -> int:
    """
    Find the pending entry for a transaction

    Raises:
        ResolutionNotFound: If no pending entry carries txn_id
    """
    for index, entry in enumerate(history):
        if entry.is_pending and entry.optimistic_id == txn_id:
            return index
    raise ResolutionNotFound(txn_id, operation)


def _report_not_found(exc: ResolutionNotFound, state: WrappedState) -> None:
    logger.error(
        "Transaction resolution failed",
        error=str(exc),
        txn_id=exc.txn_id,
        operation=exc.operation,
        history_size=len(state.history),
    )
    resolution_not_found_total.labels(operation=exc.operation).inc()


def apply_commit(state: WrappedState, txn_id: Hashable, reducer: Reducer) -> WrappedState:
    """
    Confirm transaction txn_id

    current never changes on commit - every entry was already folded into
    it on arrival. Only the replay bookkeeping (history, before_state) moves.
    An unknown id is reported and the state returned unchanged.
    """
    try:
        index = locate(state.history, txn_id, "commit")
    except ResolutionNotFound as exc:
        _report_not_found(exc, state)
        return state

    history = state.history
    if index == 0:
        next_index = next_pending_index(history[1:])
        if next_index is None:
            # Speculative window fully resolved
            committed = state.model_copy(update={"history": (), "before_state": None})
        else:
            # Everything before the next pending entry is now settled
            cut = next_index + 1
            committed = state.model_copy(
                update={
                    "history": history[cut:],
                    "before_state": fold(reducer, state.before_state, history[:cut]),
                }
            )
    else:
        resolved = history[:index] + (history[index].resolved(),) + history[index + 1 :]
        committed = state.model_copy(update={"history": resolved})

    transactions_total.labels(outcome="committed").inc()
    logger.debug(
        "Transaction committed",
        txn_id=txn_id,
        history_size=len(committed.history),
    )
    return committed


def apply_revert(state: WrappedState, txn_id: Hashable, reducer: Reducer) -> WrappedState:
    """
    Discard transaction txn_id and re-derive current without it

    An unknown id is reported and the state returned unchanged.
    """
    try:
        index = locate(state.history, txn_id, "revert")
    except ResolutionNotFound as exc:
        _report_not_found(exc, state)
        return state

    history = state.history
    before_state = state.before_state
    if index == 0:
        remainder = history[1:]
        next_index = next_pending_index(remainder)
        if next_index is None:
            reverted = state.model_copy(
                update={
                    "history": (),
                    "before_state": None,
                    "current": fold(reducer, before_state, remainder),
                }
            )
            transactions_total.labels(outcome="reverted").inc()
            logger.debug("Transaction reverted", txn_id=txn_id, history_size=0)
            return reverted
        # Resolved entries ahead of the next pending one stay in effect
        before_state = fold(reducer, before_state, remainder[:next_index])
        new_history = remainder[next_index:]
    else:
        new_history = history[:index] + history[index + 1 :]

    reverted = state.model_copy(
        update={
            "history": new_history,
            "before_state": before_state,
            "current": fold(reducer, before_state, new_history),
        }
    )
    transactions_total.labels(outcome="reverted").inc()
    logger.debug(
        "Transaction reverted",
        txn_id=txn_id,
        history_size=len(new_history),
    )
    return reverted
