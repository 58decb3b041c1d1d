"""Petri net simulation core.

Redux-style architecture where state evolves only through actions:
    Reducer(Current_State, Action) -> Next_State

Firing is resolved when a ``Fire`` action is created, so reducers stay
pure and the action log replays deterministically.
"""

from pypetri.core.actions import (
    Action,
    ActionType,
    ClearHistory,
    Fire,
    Init,
    Jump,
    Redo,
    Undo,
    clear_history,
    create_fire,
    create_init,
    jump,
    redo,
    undo,
)
from pypetri.core.history import HistoryFrame, undoable
from pypetri.core.model import InvalidModelError, Marking, Model, Transition, validate_model
from pypetri.core.reducers import SequenceEntry, marking_reducer, model_reducer, sequence_reducer
from pypetri.core.semantics import (
    DEFAULT_SEMANTICS,
    FireSemantics,
    InvalidMarkingError,
    NotFireableError,
    UnknownPlaceError,
    fire,
    is_fireable,
)
from pypetri.core.simulator import PetriNetSimulator
from pypetri.core.store import (
    SimulatorState,
    Store,
    Subscription,
    combine_reducers,
    replay,
    root_reducer,
)

__all__ = [
    "PetriNetSimulator",
    # Model
    "Model",
    "Transition",
    "Marking",
    "validate_model",
    # Fire semantics
    "FireSemantics",
    "DEFAULT_SEMANTICS",
    "is_fireable",
    "fire",
    # Errors
    "InvalidModelError",
    "InvalidMarkingError",
    "NotFireableError",
    "UnknownPlaceError",
    # Actions
    "Action",
    "ActionType",
    "Init",
    "Fire",
    "Undo",
    "Redo",
    "Jump",
    "ClearHistory",
    "create_init",
    "create_fire",
    "undo",
    "redo",
    "jump",
    "clear_history",
    # Reducers and history
    "SequenceEntry",
    "model_reducer",
    "marking_reducer",
    "sequence_reducer",
    "HistoryFrame",
    "undoable",
    # Store
    "SimulatorState",
    "Store",
    "Subscription",
    "combine_reducers",
    "root_reducer",
    "replay",
]
