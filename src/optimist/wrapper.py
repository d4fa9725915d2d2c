"""
Lifecycle Wrapper - turns a plain reducer into an optimistic one

The wrapper owns a single piece of mutable state: whether it has already
initialized. Everything else lives in the WrappedState it hands back to the
host loop, which is expected to feed it straight back on the next call.
"""

from collections.abc import Callable, Hashable, Mapping
from typing import Any

from optimist.config import OptimistConfig
from optimist.kernel.logging import get_logger
from optimist.kernel.metrics import (
    history_ceiling_exceeded_total,
    pending_history_size,
    transactions_total,
)
from optimist.markers import read_marker
from optimist.models import LogEntry, MarkerType, WrappedState
from optimist.reconcile import Reducer, apply_commit, apply_revert

logger = get_logger(__name__)


def ensure_state(state: Any) -> Any:
    """
    Return the application state, unwrapping it if it has the wrapped shape

    A value has the wrapped shape when it is a WrappedState, or a mapping
    whose "history" is a list or tuple.
    """
    if isinstance(state, WrappedState):
        return state.current
    if isinstance(state, Mapping) and isinstance(state.get("history"), (list, tuple)):
        return state.get("current")
    return state


class Optimistic:
    """
    Optimistic decorator around a reducer

    Call it exactly like the reducer it wraps: step(state, action). The first
    call (or any call with state None) treats the incoming value as raw
    application state and wraps it; every later call expects the
    WrappedState returned by the previous one.
    """

    def __init__(
        self,
        reducer: Reducer,
        config: OptimistConfig | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        """
        Args:
            reducer: Pure, total reduction function (app_state, action) -> app_state
            config: Wrapper configuration (defaults to OptimistConfig())
            **overrides: Individual config fields, e.g. max_history=20

        Raises:
            pydantic.ValidationError: If the configuration is invalid
        """
        self.reducer = reducer
        self.config = OptimistConfig.coerce(config, **overrides)
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    def reset(self) -> None:
        """Forget initialization; the next call re-wraps whatever it receives"""
        self._ready = False

    def initialize(self, state: Any) -> WrappedState:
        """Wrap raw (or already wrapped) application state"""
        # Reducers must tolerate the empty sentinel action
        current = self.reducer(ensure_state(state), {})
        self._ready = True
        logger.debug("Optimistic wrapper initialized", max_history=self.config.max_history)
        return WrappedState(history=(), current=current, before_state=None)

    def __call__(self, state: Any, action: Any) -> WrappedState:
        if not self._ready or state is None:
            state = self.initialize(state)

        marker = read_marker(action)
        marker_type = marker.type if marker is not None else None
        if marker_type is MarkerType.BEGIN and state.history:
            # Don't take a second snapshot; ride along as an in-flight action
            marker_type = None

        if marker_type is MarkerType.BEGIN:
            next_state = self._begin(state, action, marker.id)
        elif marker_type is MarkerType.COMMIT:
            next_state = apply_commit(state, marker.id, self.reducer)
        elif marker_type is MarkerType.REVERT:
            next_state = apply_revert(state, marker.id, self.reducer)
        else:
            txn_id = marker.id if marker is not None else None
            next_state = self._apply(state, action, txn_id)

        pending_history_size.set(len(next_state.history))
        return next_state

    def _begin(self, state: WrappedState, action: Any, txn_id: Hashable) -> WrappedState:
        begun = state.model_copy(
            update={
                "history": (LogEntry(action=action, optimistic_id=txn_id),),
                "before_state": state.current,
                "current": self.reducer(state.current, action),
            }
        )
        transactions_total.labels(outcome="begun").inc()
        logger.debug("Transaction begun", txn_id=txn_id, history_size=1)
        return begun

    def _apply(
        self, state: WrappedState, action: Any, txn_id: Hashable | None
    ) -> WrappedState:
        current = self.reducer(state.current, action)
        if not state.history:
            return state.model_copy(update={"current": current})

        history = state.history + (LogEntry(action=action, optimistic_id=txn_id),)
        if len(history) > self.config.max_history:
            logger.warning(
                "Possible memory leak detected: verify all actions result in a "
                "commit or revert and don't use optimistic updates for "
                "long-running server fetches",
                history_size=len(history),
                max_history=self.config.max_history,
            )
            history_ceiling_exceeded_total.inc()
        return state.model_copy(update={"history": history, "current": current})


def optimistic(
    reducer: Callable[[Any, Any], Any],
    config: OptimistConfig | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> Optimistic:
    """
    Wrap a reducer so actions can be applied optimistically

    Example:
        >>> step = optimistic(todos_reducer, max_history=50)
        >>> state = step(None, {"type": "@@INIT"})
        >>> state = step(state, begin({"type": "todos/add", "text": "milk"}, "t1"))
        >>> state = step(state, commit({"type": "todos/saved"}, "t1"))
    """
    return Optimistic(reducer, config, **overrides)
