"""Pure reducers for the model, marking and sequence slices.

Each reducer is a total function ``(state, action) -> state`` that returns
its input unchanged for actions it does not handle. Reducers never see the
fire semantics: a ``Fire`` action already carries its next marking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pyrsistent import PMap, PVector, pmap, pvector

from pypetri.core.actions import Action, Fire, Init
from pypetri.core.model import Model

INITIAL_MODEL = Model()
INITIAL_MARKING: PMap = pmap()
INITIAL_SEQUENCE: PVector = pvector()


@dataclass(frozen=True)
class SequenceEntry:
    """One fired transition, in chronological order."""

    transition_name: str
    binding: Any = None


def model_reducer(state: Model, action: Action) -> Model:
    match action:
        case Init(model=model):
            return model
        case _:
            return state


def marking_reducer(state: PMap, action: Action) -> PMap:
    match action:
        case Init(model=model):
            return model.m0
        case Fire(next_marking=next_marking):
            return next_marking
        case _:
            return state


def sequence_reducer(state: PVector, action: Action) -> PVector:
    match action:
        case Init():
            return INITIAL_SEQUENCE
        case Fire(transition=transition, binding=binding):
            return state.append(SequenceEntry(transition_name=transition.name, binding=binding))
        case _:
            return state
