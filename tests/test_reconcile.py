"""
Tests for the Reconciliation Engine

Commit and revert are exercised at the head of history, in the middle,
and with ids that don't exist. Every resulting state is checked against
the replay invariant.
"""

import pytest

from optimist.models import LogEntry, WrappedState
from optimist.reconcile import apply_commit, apply_revert, fold, locate, next_pending_index
from optimist.kernel.errors import ResolutionNotFound
from tests.helpers import (
    act,
    assert_replay_invariant,
    begin_act,
    commit_act,
    revert_act,
    trace_reducer,
)


def run(step, state, *actions):
    for action in actions:
        state = step(state, action)
        assert_replay_invariant(state, trace_reducer)
    return state


class TestHelpers:
    """fold, next_pending_index and locate"""

    def test_fold_applies_entries_in_order(self) -> None:
        entries = [LogEntry(action=act("a")), LogEntry(action=act("b"))]
        assert fold(trace_reducer, ("x",), entries) == ("x", "a", "b")

    def test_next_pending_index(self) -> None:
        entries = [LogEntry(action=act("a")), LogEntry(action=act("b"), optimistic_id=7)]
        assert next_pending_index(entries) == 1
        assert next_pending_index(entries[:1]) is None

    def test_locate_skips_resolved_entries(self) -> None:
        entries = (LogEntry(action=act("a"), optimistic_id=1).resolved(),)
        with pytest.raises(ResolutionNotFound) as excinfo:
            locate(entries, 1, "commit")
        assert excinfo.value.txn_id == 1
        assert "Failed commit. Transaction #1 does not exist!" in str(excinfo.value)


class TestCommit:
    """Commit keeps current and only moves replay bookkeeping"""

    def test_commit_only_pending_clears_history(self, step, initial) -> None:
        """Resolving the last pending entry closes the window"""
        state = run(step, initial, begin_act("a1", 1), act("a2"), commit_act(1))

        assert state.history == ()
        assert state.before_state is None
        assert state.current == ("a1", "a2")

    def test_commit_head_advances_snapshot(self, step, initial) -> None:
        """Everything before the next pending entry folds into before_state"""
        state = run(
            step, initial, begin_act("a1", 1), act("a2"), begin_act("a3", 2), commit_act(1)
        )

        assert state.before_state == ("a1", "a2")
        assert [entry.action["type"] for entry in state.history] == ["a3"]
        assert state.pending_ids == [2]
        assert state.current == ("a1", "a2", "a3")

    def test_commit_non_head_resolves_in_place(self, step, initial) -> None:
        """A committed middle entry stays in history without its id"""
        state = run(step, initial, begin_act("a1", 1), begin_act("a2", 2), commit_act(2))

        assert len(state.history) == 2
        assert state.history[1].optimistic_id is None
        assert state.pending_ids == [1]
        assert state.before_state == ()
        assert state.current == ("a1", "a2")

    def test_commit_all_out_of_order(self, step, initial) -> None:
        """Committing the tail then the head leaves a clean state"""
        state = run(
            step,
            initial,
            begin_act("a1", 1),
            begin_act("a2", 2),
            commit_act(2),
            commit_act(1),
        )

        assert state.history == ()
        assert state.before_state is None
        assert state.current == ("a1", "a2")

    def test_commit_unknown_id_is_noop(self, step, initial, metric) -> None:
        """Unknown ids are reported once and the state comes back unchanged"""
        pending = run(step, initial, begin_act("a1", 1))
        before = metric("optimist_resolution_not_found_total", {"operation": "commit"})

        state = step(pending, commit_act(99))

        assert state is pending
        assert metric("optimist_resolution_not_found_total", {"operation": "commit"}) == before + 1

    def test_commit_while_clean_is_noop(self, step, initial, metric) -> None:
        """Commit with no history is just a missing id"""
        before = metric("optimist_resolution_not_found_total", {"operation": "commit"})

        state = step(initial, commit_act(1))

        assert state == initial
        assert metric("optimist_resolution_not_found_total", {"operation": "commit"}) == before + 1

    def test_commit_twice_reports_second(self, step, initial, metric) -> None:
        """A resolved id can't be committed again"""
        state = run(step, initial, begin_act("a1", 1), begin_act("a2", 2), commit_act(2))
        before = metric("optimist_resolution_not_found_total", {"operation": "commit"})

        again = step(state, commit_act(2))

        assert again is state
        assert metric("optimist_resolution_not_found_total", {"operation": "commit"}) == before + 1


class TestRevert:
    """Revert removes the action from every future replay"""

    def test_revert_only_pending_replays_remainder(self, step, initial) -> None:
        """Plain actions that arrived after the reverted one survive"""
        state = run(step, initial, begin_act("a1", 1), act("a2"), revert_act(1))

        assert state.history == ()
        assert state.before_state is None
        assert state.current == ("a2",)

    def test_revert_head_with_next_pending(self, step, initial) -> None:
        """History restarts at the next pending entry; snapshot is kept"""
        state = run(step, initial, begin_act("a1", 1), begin_act("a2", 2), revert_act(1))

        assert state.before_state == ()
        assert state.pending_ids == [2]
        assert state.current == ("a2",)

    def test_revert_head_keeps_resolved_entries(self, step, initial) -> None:
        """Resolved entries between the head and the next pending entry stay in effect"""
        state = run(
            step, initial, begin_act("a1", 1), act("a2"), begin_act("a3", 2), revert_act(1)
        )

        assert state.before_state == ("a2",)
        assert state.pending_ids == [2]
        assert len(state.history) == 1
        assert state.current == ("a2", "a3")

    def test_revert_head_after_middle_commit(self, step, initial) -> None:
        """A committed middle entry survives a revert of the head"""
        state = run(
            step,
            initial,
            begin_act("a1", 1),
            begin_act("a2", 2),
            begin_act("a3", 3),
            commit_act(2),
            revert_act(1),
        )

        assert state.before_state == ("a2",)
        assert state.pending_ids == [3]
        assert state.current == ("a2", "a3")

    def test_revert_non_head_deletes_entry(self, step, initial) -> None:
        """A reverted middle entry is removed and current re-derived"""
        state = run(
            step, initial, begin_act("a1", 1), begin_act("a2", 2), act("a3"), revert_act(2)
        )

        assert [entry.action["type"] for entry in state.history] == ["a1", "a3"]
        assert state.before_state == ()
        assert state.current == ("a1", "a3")

    def test_revert_unknown_id_is_noop(self, step, initial, metric) -> None:
        """Unknown ids never delete an unrelated entry"""
        pending = run(step, initial, begin_act("a1", 1), act("a2"))
        before = metric("optimist_resolution_not_found_total", {"operation": "revert"})

        state = step(pending, revert_act(99))

        assert state is pending
        assert len(state.history) == 2
        assert metric("optimist_resolution_not_found_total", {"operation": "revert"}) == before + 1


class TestDirectCalls:
    """The engine routines work on hand-built states too"""

    def test_apply_commit_on_built_state(self) -> None:
        state = WrappedState(
            history=(LogEntry(action=act("a1"), optimistic_id="x"),),
            before_state=(),
            current=("a1",),
        )

        committed = apply_commit(state, "x", trace_reducer)

        assert committed == WrappedState(current=("a1",))

    def test_apply_revert_on_built_state(self) -> None:
        state = WrappedState(
            history=(
                LogEntry(action=act("a1"), optimistic_id="x"),
                LogEntry(action=act("a2")),
            ),
            before_state=("s",),
            current=("s", "a1", "a2"),
        )

        reverted = apply_revert(state, "x", trace_reducer)

        assert reverted == WrappedState(current=("s", "a2"))
