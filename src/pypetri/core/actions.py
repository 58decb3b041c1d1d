"""Actions: immutable records of every state change.

Actions are the only way to advance a simulator's state and double as its
replay log. ``Init`` and ``Fire`` change the model/marking/sequence slices;
``Undo``, ``Redo``, ``Jump`` and ``ClearHistory`` navigate the history kept
by ``pypetri.core.history.undoable``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from pyrsistent import PMap, pmap

from pypetri.core.semantics import FireFunction, InvalidMarkingError

if TYPE_CHECKING:
    from pypetri.core.model import Model, Transition


class ActionType(Enum):
    INIT = "@@pypetri/INIT"
    FIRE = "@@pypetri/FIRE"
    UNDO = "@@pypetri/UNDO"
    REDO = "@@pypetri/REDO"
    JUMP = "@@pypetri/JUMP"
    CLEAR_HISTORY = "@@pypetri/CLEAR_HISTORY"


@dataclass(frozen=True)
class Init:
    """Load ``model`` and reset marking and sequence to their initial values."""

    type: ClassVar[ActionType] = ActionType.INIT

    model: Model


@dataclass(frozen=True)
class Fire:
    """Record one fired transition and the marking it produced."""

    type: ClassVar[ActionType] = ActionType.FIRE

    transition: Transition
    binding: Any
    next_marking: PMap


@dataclass(frozen=True)
class Undo:
    type: ClassVar[ActionType] = ActionType.UNDO


@dataclass(frozen=True)
class Redo:
    type: ClassVar[ActionType] = ActionType.REDO


@dataclass(frozen=True)
class Jump:
    """Move through history: negative ``steps`` undo, positive ``steps`` redo."""

    type: ClassVar[ActionType] = ActionType.JUMP

    steps: int


@dataclass(frozen=True)
class ClearHistory:
    type: ClassVar[ActionType] = ActionType.CLEAR_HISTORY


Action = Init | Fire | Undo | Redo | Jump | ClearHistory
HistoryAction = Undo | Redo | Jump | ClearHistory


def create_init(model: Model) -> Init:
    """Wrap ``model`` into an ``Init`` action. No validation is done here."""
    return Init(model=model)


def create_fire(
    transition: Transition,
    marking: PMap,
    binding: Any,
    fire_fn: FireFunction,
) -> Fire:
    """Resolve a firing eagerly and package the result as a ``Fire`` action.

    ``fire_fn`` runs here rather than in a reducer, so reducers stay pure and
    a failed firing never produces an action.

    Args:
        transition: The transition to fire.
        marking: The marking to fire from.
        binding: Semantics-specific binding (``None`` for P/T nets).
        fire_fn: ``fire(transition, marking, binding) -> next_marking``.

    Raises:
        NotFireableError: Propagated from ``fire_fn``.
        UnknownPlaceError: Propagated from ``fire_fn``.
        InvalidMarkingError: If the result does not cover exactly the places
            of ``marking``.
    """
    result = fire_fn(transition, marking, binding)
    if not isinstance(result, Mapping):
        raise InvalidMarkingError(
            f"Fire function for '{transition.name}' returned {type(result).__name__}, "
            "expected a mapping"
        )
    if set(result.keys()) != set(marking.keys()):
        raise InvalidMarkingError(
            f"Fire function for '{transition.name}' changed the place set: "
            f"{sorted(marking.keys(), key=repr)} -> {sorted(result.keys(), key=repr)}"
        )
    # History records a Fire by identity, so the marking must be a new object.
    # An explicit pre_size keeps pmap() from returning its shared empty map.
    next_marking = pmap(dict(result), pre_size=2 * len(result) or 8)
    return Fire(transition=transition, binding=binding, next_marking=next_marking)


def undo() -> Undo:
    return Undo()


def redo() -> Redo:
    return Redo()


def jump(steps: int) -> Jump:
    if not isinstance(steps, int) or isinstance(steps, bool):
        raise TypeError(f"jump() steps must be int, got {type(steps).__name__}")
    return Jump(steps=steps)


def clear_history() -> ClearHistory:
    return ClearHistory()
