"""Pluggable fire semantics.

A semantics is a struct of three functions::

    is_fireable(transition, marking) -> bool
    fire(transition, marking, binding) -> next_marking
    choose_binding(transition, marking) -> binding | None

The module-level ``is_fireable`` and ``fire`` implement classic
Place/Transition nets and are the defaults of ``FireSemantics``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pyrsistent import PMap, pmap

if TYPE_CHECKING:
    from pypetri.core.model import Transition

IsFireable = Callable[["Transition", PMap], bool]
FireFunction = Callable[["Transition", PMap, Any], Mapping[str, Any]]
ChooseBinding = Callable[["Transition", PMap], Any]


class UnknownPlaceError(LookupError):
    """Raised when a transition references a place missing from the marking."""

    def __init__(self, transition: str, place: str) -> None:
        super().__init__(
            f"'{place}' is an arc place of '{transition}' but doesn't appear in marking"
        )
        self.transition = transition
        self.place = place


class NotFireableError(ValueError):
    """Raised when firing a transition would drive a place negative."""

    def __init__(self, transition: str, places: tuple[str, ...] = ()) -> None:
        detail = f" (would overdraw {', '.join(places)})" if places else ""
        super().__init__(f"'{transition}' is not fireable{detail}")
        self.transition = transition
        self.places = places


class InvalidMarkingError(ValueError):
    """Raised when a fire function returns a marking over a different place set."""


def is_fireable(transition: Transition, marking: Mapping[str, int]) -> bool:
    """Return True if every precondition place holds at least its arc weight."""
    return all(
        marking.get(place, 0) >= weight for place, weight in transition.preconditions.items()
    )


def fire(transition: Transition, marking: Mapping[str, int], binding: Any = None) -> PMap:
    """Fire ``transition`` under Place/Transition semantics.

    Computes ``next[p] = marking[p] - pre[p] + post[p]`` for every place of
    ``marking``. ``binding`` is ignored.

    Raises:
        UnknownPlaceError: If an arc references a place absent from ``marking``.
        NotFireableError: If any place would end up with a negative count.
    """
    pre = transition.preconditions
    post = transition.postconditions
    for place in (*pre, *post):
        if place not in marking:
            raise UnknownPlaceError(transition.name, place)

    next_marking = {
        place: tokens - pre.get(place, 0) + post.get(place, 0)
        for place, tokens in marking.items()
    }
    overdrawn = tuple(place for place, tokens in next_marking.items() if tokens < 0)
    if overdrawn:
        raise NotFireableError(transition.name, overdrawn)
    return pmap(next_marking)


@dataclass(frozen=True)
class FireSemantics:
    """Set of functions defining whether and how transitions fire.

    Any function may be replaced independently; unset ones keep the
    Place/Transition defaults.

    Attributes:
        is_fireable: Advisory predicate used for UI/fireability queries.
        fire: Computes the next marking; the authoritative check.
        choose_binding: Optional binding selector. ``None`` means every
            fire uses binding ``None``.
    """

    is_fireable: IsFireable = is_fireable
    fire: FireFunction = fire
    choose_binding: ChooseBinding | None = None

    def override(self, **functions: Callable[..., Any] | None) -> FireSemantics:
        """Return a copy with the given functions replaced."""
        return dataclasses.replace(self, **functions)

    def binding_for(self, transition: Transition, marking: PMap) -> Any:
        if self.choose_binding is None:
            return None
        return self.choose_binding(transition, marking)


DEFAULT_SEMANTICS = FireSemantics()
