"""PetriNetSimulator - the facade external collaborators drive.

Renderers and other front ends read ``marking()``/``sequence()``, subscribe
to changes, and call ``fire()``/``undo()``/``redo()``. Every command is
turned into an action and dispatched against the simulator's own ``Store``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyrsistent import PMap, PVector

from pypetri.core import actions
from pypetri.core.actions import Action
from pypetri.core.model import Model, Transition, validate_model
from pypetri.core.semantics import (
    DEFAULT_SEMANTICS,
    FireSemantics,
    InvalidMarkingError,
    NotFireableError,
    UnknownPlaceError,
)
from pypetri.core.store import SimulatorState, Store, Subscription, root_reducer

logger = logging.getLogger(__name__)


class PetriNetSimulator:
    """Petri net simulator with undo/redo.

    The marking evolves only through ``fire()``; the firing rule is given by
    ``semantics`` and defaults to Place/Transition nets. Each simulator owns
    its store, so simulators never share state.

    Attributes:
        model: The simulated model.
        semantics: The fire semantics in use.
        state: The current ``SimulatorState`` snapshot.
        actions: Every dispatched action, oldest first.
    """

    def __init__(
        self,
        model: Model | Mapping[str, Any],
        *,
        semantics: FireSemantics | None = None,
        history_limit: int | None = None,
        enable_logging: bool = False,
    ) -> None:
        """Create a simulator and load ``model``.

        Args:
            model: A ``Model`` or its plain-dict layout.
            semantics: Fire semantics. Defaults to Place/Transition nets.
            history_limit: Max undo steps retained. Use None for unbounded
                history.
            enable_logging: Log every dispatched action at DEBUG level.

        Raises:
            InvalidModelError: If the model violates its invariants.
            ValueError: If ``history_limit`` is less than 1.
        """
        if history_limit is not None and history_limit < 1:
            raise ValueError("history_limit must be >= 1 or None")

        if isinstance(model, Model):
            validate_model(model)
            self._model = model
        else:
            self._model = Model.from_dict(model)

        self._semantics = semantics if semantics is not None else DEFAULT_SEMANTICS
        self._history_limit = history_limit
        self._store = Store(root_reducer(limit=history_limit), enable_logging=enable_logging)
        self._load()

    def _load(self) -> None:
        # One update: the initial marking starts history and is never undoable.
        self._store.dispatch_batch([actions.create_init(self._model), actions.clear_history()])

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def model(self) -> Model:
        return self._store.get_state().model

    @property
    def semantics(self) -> FireSemantics:
        return self._semantics

    @property
    def state(self) -> SimulatorState:
        return self._store.get_state()

    @property
    def actions(self) -> tuple[Action, ...]:
        return self._store.actions

    @property
    def history_limit(self) -> int | None:
        return self._history_limit

    def marking(self) -> PMap:
        """Return the current marking."""
        return self._store.get_state().marking.present

    def sequence(self) -> PVector:
        """Return the transitions (with their bindings) fired so far."""
        return self._store.get_state().sequence.present

    @property
    def can_undo(self) -> bool:
        return self._store.get_state().marking.can_undo

    @property
    def can_redo(self) -> bool:
        return self._store.get_state().marking.can_redo

    def _resolve_transition(self, transition: str | Transition, *, method: str) -> Transition:
        if isinstance(transition, Transition):
            return transition
        if isinstance(transition, str):
            return self.model.transition(transition)
        raise TypeError(
            f"{method}() expects a Transition or transition name, got {type(transition).__name__}"
        )

    def is_fireable(self, transition: str | Transition) -> bool:
        """Advisory fireability check under the current marking."""
        resolved = self._resolve_transition(transition, method="is_fireable")
        return self._semantics.is_fireable(resolved, self.marking())

    def fireable_transitions(self) -> list[Transition]:
        """Return the transitions fireable under the current marking, in model order."""
        marking = self.marking()
        return [t for t in self.model.transitions if self._semantics.is_fireable(t, marking)]

    # =========================================================================
    # Commands
    # =========================================================================

    def fire(self, transition: str | Transition) -> PMap:
        """Attempt to fire ``transition`` and return the new marking.

        The binding is chosen by ``semantics.choose_binding`` when set. The
        fire is all-or-nothing: on error nothing is dispatched.

        Args:
            transition: A ``Transition`` or the name of one in the model.

        Raises:
            NotFireableError: If firing would overdraw a place.
            UnknownPlaceError: If the transition references an unknown place.
            InvalidMarkingError: If a custom fire function changed the place set.
            KeyError: If no transition has the given name.
        """
        resolved = self._resolve_transition(transition, method="fire")
        with self._store.lock:
            marking = self.marking()
            binding = self._semantics.binding_for(resolved, marking)
            try:
                action = actions.create_fire(resolved, marking, binding, self._semantics.fire)
            except (NotFireableError, UnknownPlaceError, InvalidMarkingError) as exc:
                logger.debug("fire %r rejected: %s", resolved.name, exc)
                raise
            self._store.dispatch(action)
            return self.marking()

    def undo(self) -> PMap:
        """Undo the last transition firing. No-op when there is nothing to undo."""
        self._store.dispatch(actions.undo())
        return self.marking()

    def redo(self) -> PMap:
        """Redo the last undone firing. No-op when there is nothing to redo."""
        self._store.dispatch(actions.redo())
        return self.marking()

    def jump(self, steps: int) -> PMap:
        """Undo (negative ``steps``) or redo (positive ``steps``) several firings.

        Steps beyond the available history are ignored.
        """
        self._store.dispatch(actions.jump(steps))
        return self.marking()

    def reset(self) -> PMap:
        """Reload the model: initial marking, empty sequence, empty history."""
        self._load()
        return self.marking()

    def replay(self) -> SimulatorState:
        """Rebuild the current state from the action log.

        The log is folded with this simulator's own reducer, so
        ``history_limit`` applies exactly as it did live.
        """
        return self._store.replay()

    def subscribe(self, listener: Callable[[PetriNetSimulator], None]) -> Subscription:
        """Call ``listener(simulator)`` after every state change.

        Returns:
            A ``Subscription`` whose ``unsubscribe()`` stops notifications.
        """
        return self._store.subscribe(lambda _state: listener(self))
