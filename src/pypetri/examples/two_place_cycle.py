"""Two-place cycle: the smallest net with a token-multiplying transition.

``t1`` moves the single token out of ``p0`` and puts two into ``p1``;
``t0`` moves one back. ``drive()`` replays keyboard-style history
navigation (``"left"`` undoes, ``"right"`` redoes) the way an interactive
front end would.
"""

from __future__ import annotations

from collections.abc import Iterable

from pyrsistent import PMap

from pypetri.core.model import Model
from pypetri.core.simulator import PetriNetSimulator

MODEL = {
    "places": ["p0", "p1"],
    "transitions": [
        {"name": "t1", "preconditions": {"p0": 1}, "postconditions": {"p1": 2}},
        {"name": "t0", "preconditions": {"p1": 1}, "postconditions": {"p0": 1}},
    ],
    "m0": {"p0": 1, "p1": 0},
}


def build_model() -> Model:
    return Model.from_dict(MODEL)


def drive(simulator: PetriNetSimulator, keys: Iterable[str]) -> PMap:
    """Apply history-navigation keys and return the resulting marking.

    Unknown keys are ignored, as a key handler would.
    """
    for key in keys:
        match key:
            case "left":
                simulator.undo()
            case "right":
                simulator.redo()
            case _:
                pass
    return simulator.marking()


if __name__ == "__main__":
    sim = PetriNetSimulator(build_model())
    sim.fire("t1")
    sim.fire("t0")
    print("after t1, t0:", dict(sim.marking()))
    print("after left:", dict(drive(sim, ["left"])))
    print("after right:", dict(drive(sim, ["right"])))
    print("sequence:", [entry.transition_name for entry in sim.sequence()])
