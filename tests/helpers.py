"""
Shared test helpers

Fun fact: A trace reducer (one that just records what it saw) is the
simplest way to prove replay order - if the tuple matches, the fold matched.
"""

from collections.abc import Hashable
from typing import Any

from optimist import begin, commit, revert
from optimist.reconcile import fold


def act(name: str) -> dict[str, Any]:
    """Plain, unmarked action"""
    return {"type": name}


def begin_act(name: str, txn_id: Hashable) -> dict[str, Any]:
    return begin(act(name), txn_id)


def commit_act(txn_id: Hashable) -> dict[str, Any]:
    return commit(act("commit"), txn_id)


def revert_act(txn_id: Hashable) -> dict[str, Any]:
    return revert(act("revert"), txn_id)


def trace_reducer(state: Any, action: Any) -> tuple[str, ...]:
    """Record every action type seen; the {} sentinel leaves state alone"""
    state = tuple(state or ())
    if isinstance(action, dict):
        name = action.get("type")
    else:
        name = getattr(action, "type", None)
    if name is None:
        return state
    return state + (name,)


def assert_replay_invariant(wrapped, reducer) -> None:
    """current must equal before_state folded through history"""
    if wrapped.history:
        assert wrapped.before_state is not None
        assert wrapped.current == fold(reducer, wrapped.before_state, wrapped.history)
    else:
        assert wrapped.before_state is None


def counter_reducer(state: Any, action: Any) -> int:
    """Tiny numeric reducer - 'add' and 'double' only"""
    state = 0 if state is None else state
    kind = action.get("type") if isinstance(action, dict) else getattr(action, "type", None)
    if kind == "add":
        return state + action.get("amount", 1)
    if kind == "double":
        return state * 2
    return state
