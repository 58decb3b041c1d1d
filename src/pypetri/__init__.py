"""pypetri - Petri net simulation with pluggable fire semantics and undo/redo."""

from pypetri.core import (
    FireSemantics,
    InvalidMarkingError,
    InvalidModelError,
    Model,
    NotFireableError,
    PetriNetSimulator,
    SequenceEntry,
    Transition,
    UnknownPlaceError,
)

__all__ = [
    "PetriNetSimulator",
    "Model",
    "Transition",
    "FireSemantics",
    "SequenceEntry",
    "InvalidModelError",
    "InvalidMarkingError",
    "NotFireableError",
    "UnknownPlaceError",
]
