"""Immutable Petri net model.

A model is the static half of a simulation: the declared places, the
transitions with their arc weights, and the initial marking ``m0``.
Markings are plain ``PMap[str, int]`` snapshots and never change in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pyrsistent import InvariantException, PMap, PRecord, PVector, field, pmap, pvector, thaw

Marking = PMap


class InvalidModelError(ValueError):
    """Raised when a model violates its structural invariants."""


class Transition(PRecord):
    """One transition of a Place/Transition net.

    Attributes:
        name: Unique transition name within the model.
        preconditions: Place -> positive weight consumed on firing.
        postconditions: Place -> positive weight produced on firing.
        attributes: Opaque extra data for custom fire semantics
            (guards, colour types, ...). Passed through unmodified.
    """

    name = field(type=str, mandatory=True)
    preconditions = field(type=PMap, initial=pmap(), factory=pmap)
    postconditions = field(type=PMap, initial=pmap(), factory=pmap)
    attributes = field(type=PMap, initial=pmap(), factory=pmap)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transition:
        """Build a transition from its plain-dict layout.

        Keys other than ``name``, ``preconditions`` and ``postconditions``
        are collected into ``attributes``.
        """
        extra = {
            key: value
            for key, value in data.items()
            if key not in ("name", "preconditions", "postconditions", "attributes")
        }
        extra.update(data.get("attributes", {}))
        return cls(
            name=data["name"],
            preconditions=data.get("preconditions", {}),
            postconditions=data.get("postconditions", {}),
            attributes=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = thaw(self.attributes)
        data.update(
            name=self.name,
            preconditions=dict(self.preconditions),
            postconditions=dict(self.postconditions),
        )
        return data


class Model(PRecord):
    """Static description of a Petri net.

    Attributes:
        places: Place identifiers in declaration order.
        transitions: Transitions in declaration order.
        m0: Initial marking, one token count per declared place.
    """

    places = field(type=PVector, initial=pvector(), factory=pvector)
    transitions = field(type=PVector, initial=pvector(), factory=pvector)
    m0 = field(type=PMap, initial=pmap(), factory=pmap)

    @classmethod
    def build(
        cls,
        places: Iterable[str],
        transitions: Iterable[Transition | Mapping[str, Any]],
        m0: Mapping[str, int],
    ) -> Model:
        """Build and validate a model.

        Raises:
            InvalidModelError: If the model violates an invariant.
        """
        records = [_transition_record(index, entry) for index, entry in enumerate(transitions)]
        try:
            model = cls(places=list(places), transitions=records, m0=m0)
        except (TypeError, InvariantException) as exc:
            raise InvalidModelError(f"Malformed model: {exc}") from exc
        validate_model(model)
        return model

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Model:
        """Build and validate a model from ``{"places", "transitions", "m0"}``."""
        return cls.build(
            places=data.get("places", ()),
            transitions=data.get("transitions", ()),
            m0=data.get("m0", {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "places": list(self.places),
            "transitions": [t.to_dict() for t in self.transitions],
            "m0": dict(self.m0),
        }

    def transition(self, name: str) -> Transition:
        """Return the transition called ``name``."""
        for transition in self.transitions:
            if transition.name == name:
                return transition
        raise KeyError(name)


def _transition_record(index: int, entry: Transition | Mapping[str, Any]) -> Transition:
    if isinstance(entry, Transition):
        return entry
    if not isinstance(entry, Mapping):
        raise InvalidModelError(
            f"Transition #{index} must be a mapping or Transition, got {type(entry).__name__}"
        )
    if "name" not in entry:
        raise InvalidModelError(f"Transition #{index} has no name")
    try:
        return Transition.from_dict(entry)
    except (TypeError, ValueError, AttributeError, InvariantException) as exc:
        raise InvalidModelError(
            f"Malformed transition #{index} ({entry['name']!r}): {exc}"
        ) from exc


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_arcs(transition: Transition, kind: str, declared: set[str]) -> None:
    for place, weight in getattr(transition, kind).items():
        if place not in declared:
            raise InvalidModelError(
                f"Transition '{transition.name}' {kind} reference undeclared place '{place}'"
            )
        if not _is_count(weight) or weight < 1:
            raise InvalidModelError(
                f"Transition '{transition.name}' {kind} weight for '{place}' must be a "
                f"positive int, got {weight!r}"
            )


def validate_model(model: Model) -> None:
    """Check the structural invariants of ``model``.

    - place identifiers are unique strings
    - transitions are ``Transition`` records with unique names
    - every arc references a declared place with a positive int weight
    - ``m0`` assigns a non-negative int to exactly the declared places

    Raises:
        InvalidModelError: On the first violated invariant.
    """
    declared: set[str] = set()
    for place in model.places:
        if not isinstance(place, str):
            raise InvalidModelError(f"Place identifiers must be str, got {place!r}")
        if place in declared:
            raise InvalidModelError(f"Duplicate place '{place}'")
        declared.add(place)

    names: set[str] = set()
    for transition in model.transitions:
        if not isinstance(transition, Transition):
            raise InvalidModelError(
                f"Model transitions must be Transition records, got {type(transition).__name__}"
            )
        if transition.name in names:
            raise InvalidModelError(f"Duplicate transition '{transition.name}'")
        names.add(transition.name)
        _validate_arcs(transition, "preconditions", declared)
        _validate_arcs(transition, "postconditions", declared)

    missing = declared - set(model.m0.keys())
    if missing:
        raise InvalidModelError(
            f"Initial marking has no value for places {sorted(missing, key=repr)}"
        )
    extra = set(model.m0.keys()) - declared
    if extra:
        raise InvalidModelError(
            f"Initial marking references undeclared places {sorted(extra, key=repr)}"
        )
    for place, tokens in model.m0.items():
        if not _is_count(tokens) or tokens < 0:
            raise InvalidModelError(
                f"Initial marking for '{place}' must be a non-negative int, got {tokens!r}"
            )
