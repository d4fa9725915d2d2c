"""
optimist - Optimistic-update reconciliation for pure reducers

Apply actions speculatively, then commit or revert each one by transaction
id, while the visible state always matches what the confirmed actions alone
would have produced.

Fun fact: "Optimistic UI" became mainstream with chat apps - your message
shows up instantly and quietly turns red only if the server says no.
"""

from optimist.config import OptimistConfig
from optimist.markers import begin, commit, read_marker, revert, strip_marker, with_marker
from optimist.models import (
    Action,
    ActionMeta,
    LogEntry,
    MarkerType,
    OptimisticMarker,
    WrappedState,
)
from optimist.wrapper import Optimistic, ensure_state, optimistic

BEGIN = MarkerType.BEGIN
COMMIT = MarkerType.COMMIT
REVERT = MarkerType.REVERT

__version__ = "0.1.0"
__all__ = [
    # Wrapper
    "optimistic",
    "Optimistic",
    "ensure_state",
    "OptimistConfig",
    # Markers
    "BEGIN",
    "COMMIT",
    "REVERT",
    "MarkerType",
    "begin",
    "commit",
    "revert",
    "strip_marker",
    "with_marker",
    "read_marker",
    # Models
    "Action",
    "ActionMeta",
    "OptimisticMarker",
    "LogEntry",
    "WrappedState",
    "__version__",
]
