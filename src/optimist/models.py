"""
Optimist data model - markers, log entries and the wrapped state

The wrapped state is what the host loop stores between calls. It holds the
externally visible `current` state plus just enough history to re-derive it
when a speculative action is committed or reverted out of order.

Fun fact: Keeping a snapshot plus a replayable log is the same trick
databases use for write-ahead logging - checkpoint, then replay the tail.
"""

from collections.abc import Hashable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class MarkerType(str, Enum):
    """Kind of optimism marker an action can carry"""

    BEGIN = "@@optimist/BEGIN"
    COMMIT = "@@optimist/COMMIT"
    REVERT = "@@optimist/REVERT"


class OptimisticMarker(BaseModel):
    """
    Marker attached to an action at meta.optimistic

    The id is chosen by the caller and pairs a BEGIN with its later
    COMMIT or REVERT.
    """

    type: MarkerType
    id: Hashable

    model_config = {"frozen": True}


class ActionMeta(BaseModel):
    """Metadata envelope carried by an Action"""

    optimistic: OptimisticMarker | None = None

    model_config = {"frozen": True}


class Action(BaseModel):
    """
    Typed action for hosts that don't want to use plain dicts

    Reducers receive Action instances unchanged; plain mapping actions
    (`{"type": ..., "meta": {"optimistic": {...}}}`) are supported as well.
    """

    type: str = Field(..., description="Action type, e.g. 'todos/add'")
    payload: dict[str, Any] = Field(default_factory=dict)
    meta: ActionMeta = Field(default_factory=ActionMeta)

    model_config = {"frozen": True}

    @property
    def marker(self) -> OptimisticMarker | None:
        return self.meta.optimistic


class LogEntry(BaseModel):
    """
    One action held in the speculative history

    An entry with an optimistic_id is pending (awaiting commit/revert).
    An entry whose id has been cleared is resolved - kept only because
    later entries still need it for replay.
    """

    action: Any
    optimistic_id: Hashable | None = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def is_pending(self) -> bool:
        return self.optimistic_id is not None

    def resolved(self) -> "LogEntry":
        """Return a copy of this entry with its pending id cleared"""
        return self.model_copy(update={"optimistic_id": None})


class WrappedState(BaseModel):
    """
    State handed back to the host loop on every step

    Invariants:
    - before_state is set exactly when history is non-empty
    - with history non-empty, current == fold(before_state, history)
    """

    history: tuple[LogEntry, ...] = ()
    current: Any = None
    before_state: Any = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def _before_state_requires_history(self) -> "WrappedState":
        if not self.history and self.before_state is not None:
            raise ValueError("before_state must be None when history is empty")
        return self

    @property
    def is_pending(self) -> bool:
        """True while any speculative window is open"""
        return bool(self.history)

    @property
    def pending_ids(self) -> list[Hashable]:
        """Transaction ids still awaiting commit or revert, in arrival order"""
        return [entry.optimistic_id for entry in self.history if entry.is_pending]
