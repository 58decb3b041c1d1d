"""Fire semantics with a runtime binding: pick one of several resource pools.

A transition may list interchangeable input places in its ``alternatives``
attribute. Firing consumes one token from exactly one of them; which one is
decided by ``choose_pool`` and recorded as the binding of the fired
sequence entry. Regular pre/postconditions keep their P/T meaning.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pyrsistent import PMap

from pypetri.core.model import Model
from pypetri.core.semantics import FireSemantics, NotFireableError
from pypetri.core.semantics import fire as pt_fire
from pypetri.core.semantics import is_fireable as pt_is_fireable

if TYPE_CHECKING:
    from pypetri.core.model import Transition


def _alternatives(transition: Transition) -> tuple[str, ...]:
    return tuple(transition.attributes.get("alternatives", ()))


def choose_pool(transition: Transition, marking: Mapping[str, int]) -> str | None:
    """Pick the alternative holding the most tokens; ties go to the first listed."""
    candidates = [place for place in _alternatives(transition) if marking.get(place, 0) > 0]
    if not candidates:
        return None
    return max(candidates, key=lambda place: marking[place])


def pool_is_fireable(transition: Transition, marking: Mapping[str, int]) -> bool:
    if not pt_is_fireable(transition, marking):
        return False
    alternatives = _alternatives(transition)
    return not alternatives or any(marking.get(place, 0) > 0 for place in alternatives)


def pool_fire(transition: Transition, marking: PMap, binding: Any) -> PMap:
    """Fire the P/T part, then take one token from the bound pool."""
    next_marking = pt_fire(transition, marking, None)
    if not _alternatives(transition):
        return next_marking
    if binding is None:
        raise NotFireableError(transition.name, _alternatives(transition))
    if binding not in _alternatives(transition):
        raise ValueError(f"'{binding}' is not an alternative of '{transition.name}'")
    if next_marking[binding] < 1:
        raise NotFireableError(transition.name, (binding,))
    return next_marking.set(binding, next_marking[binding] - 1)


POOL_SEMANTICS = FireSemantics(
    is_fireable=pool_is_fireable,
    fire=pool_fire,
    choose_binding=choose_pool,
)


def build_model() -> Model:
    """Print jobs served by whichever printer has the most free slots."""
    return Model.from_dict(
        {
            "places": ["queued", "printer_a", "printer_b", "printed"],
            "transitions": [
                {
                    "name": "print",
                    "preconditions": {"queued": 1},
                    "postconditions": {"printed": 1},
                    "alternatives": ["printer_a", "printer_b"],
                },
            ],
            "m0": {"queued": 3, "printer_a": 1, "printer_b": 2, "printed": 0},
        }
    )
