"""
Optimism marker detection and marking helpers

Actions carry their marker at the conventional meta.optimistic path.
Typed `Action` models expose it as a field; plain mappings carry it as
action["meta"]["optimistic"]. Anything else has no marker.
"""

from collections.abc import Hashable, Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from optimist.kernel.logging import get_logger
from optimist.models import Action, MarkerType, OptimisticMarker

logger = get_logger(__name__)

A = TypeVar("A")


def read_marker(action: Any) -> OptimisticMarker | None:
    """
    Return the optimism marker carried by an action, or None

    A marker with an unknown type or without an id is treated as absent.
    """
    if isinstance(action, Action):
        return action.meta.optimistic

    if not isinstance(action, Mapping):
        return None

    meta = action.get("meta")
    if not isinstance(meta, Mapping):
        return None

    raw = meta.get("optimistic")
    if raw is None or isinstance(raw, OptimisticMarker):
        return raw
    if not isinstance(raw, Mapping) or raw.get("id") is None:
        return None

    try:
        return OptimisticMarker.model_validate(dict(raw))
    except ValidationError:
        logger.debug("Ignoring malformed optimistic marker", marker=dict(raw))
        return None


def with_marker(action: A, marker: OptimisticMarker | None) -> A:
    """
    Return a copy of the action carrying the given marker (None removes it)

    Raises:
        TypeError: If the action is neither an Action nor a mapping
    """
    if isinstance(action, Action):
        meta = action.meta.model_copy(update={"optimistic": marker})
        return action.model_copy(update={"meta": meta})  # type: ignore[return-value]

    if isinstance(action, Mapping):
        meta = dict(action.get("meta") or {})
        meta["optimistic"] = (
            None if marker is None else {"type": marker.type, "id": marker.id}
        )
        return {**action, "meta": meta}  # type: ignore[return-value]

    raise TypeError(
        f"Cannot attach an optimistic marker to {type(action).__name__}; "
        "use an Action or a mapping"
    )


def begin(action: A, txn_id: Hashable) -> A:
    """Mark an action as the start of transaction txn_id"""
    return with_marker(action, OptimisticMarker(type=MarkerType.BEGIN, id=txn_id))


def commit(action: A, txn_id: Hashable) -> A:
    """Mark an action as confirming transaction txn_id"""
    return with_marker(action, OptimisticMarker(type=MarkerType.COMMIT, id=txn_id))


def revert(action: A, txn_id: Hashable) -> A:
    """Mark an action as discarding transaction txn_id"""
    return with_marker(action, OptimisticMarker(type=MarkerType.REVERT, id=txn_id))


def strip_marker(action: A) -> A:
    """Return a copy of the action with no optimism marker"""
    return with_marker(action, None)
