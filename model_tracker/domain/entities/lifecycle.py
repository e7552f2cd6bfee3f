"""Lifecycle states and the operations that move a record between them."""

from enum import Enum

from model_tracker.domain.exceptions import InvalidTransitionError


class RecordState(str, Enum):
    """Where a record sits in its tracked lifecycle."""

    NEW = "new"
    PERSISTED = "persisted"
    TRASHED = "trashed"


class TrackingOperation(str, Enum):
    """Operations that trigger audit field resolution."""

    CREATE = "create"
    UPDATE = "update"
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"


_TRANSITIONS: dict[tuple[RecordState, TrackingOperation], RecordState] = {
    (RecordState.NEW, TrackingOperation.CREATE): RecordState.PERSISTED,
    (RecordState.PERSISTED, TrackingOperation.UPDATE): RecordState.PERSISTED,
    (RecordState.PERSISTED, TrackingOperation.SOFT_DELETE): RecordState.TRASHED,
    (RecordState.TRASHED, TrackingOperation.RESTORE): RecordState.PERSISTED,
}


def can_transition(state: RecordState, operation: TrackingOperation) -> bool:
    """Return ``True`` when ``operation`` is valid for a record in ``state``."""

    return (state, operation) in _TRANSITIONS


def transition(state: RecordState, operation: TrackingOperation) -> RecordState:
    """Return the state reached by applying ``operation`` to ``state``."""

    try:
        return _TRANSITIONS[(state, operation)]
    except KeyError as exc:
        msg = f"Cannot {operation.value} a record that is {state.value}"
        raise InvalidTransitionError(msg) from exc


__all__ = ["RecordState", "TrackingOperation", "can_transition", "transition"]
