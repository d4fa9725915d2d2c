#!/usr/bin/env python3
"""
Optimistic Todo List - Speculate, Then Reconcile

This example walks through the lifecycle of optimistic updates on a tiny
todo-list reducer.

Key Concepts:
1. BEGIN applies an action immediately and snapshots the state before it
2. Unmarked actions keep flowing while a save is in flight
3. COMMIT confirms the speculative action - nothing visible changes
4. REVERT removes the speculative action and replays everything else

Scenario:
- Add "buy milk" optimistically, then the server confirms it
- Add "walk dog" optimistically, toggle "buy milk" meanwhile
- The server rejects "walk dog" - it disappears, the toggle survives

Run:
    python examples/todo_demo.py
"""

from typing import Any

from optimist import Action, begin, commit, ensure_state, optimistic, revert
from optimist.kernel.logging import configure_logging


def todos(state: Any, action: Any) -> tuple[dict, ...]:
    """Plain reducer: knows nothing about optimism"""
    state = tuple(state or ())
    if not isinstance(action, Action):
        return state
    if action.type == "todos/add":
        return state + ({"text": action.payload["text"], "done": False},)
    if action.type == "todos/toggle":
        return tuple(
            {**todo, "done": not todo["done"]} if todo["text"] == action.payload["text"] else todo
            for todo in state
        )
    return state


def print_section(title: str) -> None:
    """Print section header"""
    print(f"\n{'='*70}")
    print(f"  {title}")
    print(f"{'='*70}\n")


def show(state: Any) -> None:
    for todo in ensure_state(state):
        mark = "x" if todo["done"] else " "
        print(f"  [{mark}] {todo['text']}")
    print(f"  (pending: {state.pending_ids})")


def main() -> None:
    configure_logging(json_output=False, log_level="DEBUG")
    step = optimistic(todos, max_history=10)
    state = step(None, Action(type="@@INIT"))

    print_section("1. Optimistic add, then commit")
    state = step(state, begin(Action(type="todos/add", payload={"text": "buy milk"}), "req-1"))
    show(state)
    state = step(state, commit(Action(type="todos/saved"), "req-1"))
    show(state)

    print_section("2. Second save in flight while the user keeps working")
    state = step(state, begin(Action(type="todos/add", payload={"text": "walk dog"}), "req-2"))
    state = step(state, Action(type="todos/toggle", payload={"text": "buy milk"}))
    show(state)

    print_section("3. Server rejects req-2")
    state = step(state, revert(Action(type="todos/save_failed"), "req-2"))
    show(state)


if __name__ == "__main__":
    main()
