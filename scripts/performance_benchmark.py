#!/usr/bin/env python3
"""
Performance Benchmark for optimist

Measures the cost of the wrapper on top of a trivial reducer:

- Clean path: unmarked actions with no window open
- Pending path: appends while a speculative window is open
- Resolution: committing and reverting out of order in a long history

Run:
    python scripts/performance_benchmark.py
"""

import time

from optimist import begin, commit, optimistic, revert


def count(state: int, action: dict) -> int:
    return state + 1 if action.get("type") == "inc" else state


def benchmark_clean_path(num_actions: int = 10_000) -> dict:
    """Benchmark plain pass-through reduction"""
    print("\n=== Benchmark: Clean Path ===")
    step = optimistic(count)
    state = step(0, {})

    start_time = time.perf_counter()
    for _ in range(num_actions):
        state = step(state, {"type": "inc"})
    duration = time.perf_counter() - start_time

    rate = num_actions / duration
    print(f"Steps: {num_actions}, duration: {duration:.3f}s, rate: {rate:,.0f}/s")
    return {"steps": num_actions, "rate": rate}


def benchmark_pending_path(num_actions: int = 1_000) -> dict:
    """Benchmark appends and out-of-order resolution inside one window"""
    print("\n=== Benchmark: Pending Path ===")
    step = optimistic(count, max_history=num_actions * 2)
    state = step(0, {})

    start_time = time.perf_counter()
    for txn_id in range(num_actions):
        state = step(state, begin({"type": "inc"}, txn_id))
    append_duration = time.perf_counter() - start_time

    start_time = time.perf_counter()
    # Resolve from the tail so every revert replays the remaining history
    for txn_id in reversed(range(1, num_actions)):
        marker = commit if txn_id % 2 else revert
        state = step(state, marker({"type": "ack"}, txn_id))
    state = step(state, commit({"type": "ack"}, 0))
    resolve_duration = time.perf_counter() - start_time

    print(f"Appends: {num_actions}, duration: {append_duration:.3f}s")
    print(f"Resolutions: {num_actions}, duration: {resolve_duration:.3f}s")
    print(f"Final state: {state.current}, history: {len(state.history)}")
    return {"append_s": append_duration, "resolve_s": resolve_duration}


def main() -> None:
    print("=" * 70)
    print("  optimist Performance Benchmark")
    print("=" * 70)
    benchmark_clean_path()
    benchmark_pending_path()


if __name__ == "__main__":
    main()
