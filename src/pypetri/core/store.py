"""Store: the single mutation gateway of a simulator.

One ``Store`` is owned by each ``PetriNetSimulator``; stores are never shared.
All state changes go through ``Store.dispatch``, which runs the root reducer,
appends the action to the replay log and notifies subscribers, all before
returning.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from pyrsistent import PRecord, field

from pypetri.core.actions import Action
from pypetri.core.history import HistoryFrame, undoable
from pypetri.core.model import Model
from pypetri.core.reducers import (
    INITIAL_MARKING,
    INITIAL_MODEL,
    INITIAL_SEQUENCE,
    marking_reducer,
    model_reducer,
    sequence_reducer,
)

logger = logging.getLogger(__name__)

RootReducer = Callable[["SimulatorState", Action], "SimulatorState"]
Listener = Callable[["SimulatorState"], None]


class SimulatorState(PRecord):
    """Immutable snapshot of one simulator.

    Attributes:
        model: The loaded model.
        marking: History of markings; ``marking.present`` is current.
        sequence: History of fired sequences; ``sequence.present`` is current.
    """

    model = field(type=Model, initial=INITIAL_MODEL)
    marking = field(type=HistoryFrame, initial=HistoryFrame(present=INITIAL_MARKING))
    sequence = field(type=HistoryFrame, initial=HistoryFrame(present=INITIAL_SEQUENCE))


def combine_reducers(**slices: Callable[[Any, Action], Any]) -> RootReducer:
    """Build a root reducer from one reducer per ``SimulatorState`` field.

    The returned reducer hands each slice its own part of the state and
    returns the previous state object when no slice changed.
    """

    def reduce(state: SimulatorState, action: Action) -> SimulatorState:
        updates: dict[str, Any] = {}
        for name, reducer in slices.items():
            previous = getattr(state, name)
            current = reducer(previous, action)
            if current is not previous:
                updates[name] = current
        if not updates:
            return state
        return state.set(**updates)

    return reduce


def root_reducer(*, limit: int | None = None) -> RootReducer:
    """Root reducer with undoable ``marking`` and ``sequence`` slices.

    Both slices receive the same action stream, so their histories stay
    index-aligned.
    """
    return combine_reducers(
        model=model_reducer,
        marking=undoable(marking_reducer, limit=limit),
        sequence=undoable(sequence_reducer, limit=limit),
    )


def replay(
    actions: Iterable[Action],
    *,
    reducer: RootReducer | None = None,
    state: SimulatorState | None = None,
) -> SimulatorState:
    """Fold ``actions`` into a state, starting from ``state`` or the empty state.

    ``reducer`` defaults to ``root_reducer()`` without a history limit; pass
    the reducer the actions were dispatched through (``Store.reducer``) to
    reproduce a limited history.
    """
    reduce = reducer if reducer is not None else root_reducer()
    current = state if state is not None else SimulatorState()
    for action in actions:
        current = reduce(current, action)
    return current


class Subscription:
    """Handle returned by ``Store.subscribe``."""

    def __init__(self, store: Store, id: int, listener: Listener) -> None:
        self._store = store
        self.id = id
        self.listener = listener

    @property
    def active(self) -> bool:
        return self.id in self._store._listeners

    def unsubscribe(self) -> None:
        """Stop receiving notifications. Safe to call more than once."""
        self._store._listeners.pop(self.id, None)


class Store:
    """Synchronous state container with dispatch/subscribe.

    Attributes:
        reducer: The root reducer every dispatch goes through.
        actions: Every dispatched action, oldest first.
    """

    def __init__(
        self,
        reducer: RootReducer,
        state: SimulatorState | None = None,
        *,
        enable_logging: bool = False,
    ) -> None:
        self._reducer = reducer
        self._initial_state = state if state is not None else SimulatorState()
        self._state = self._initial_state
        self._actions: list[Action] = []
        self._listeners: dict[int, Listener] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        self._enable_logging = enable_logging

    @property
    def reducer(self) -> RootReducer:
        return self._reducer

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    @property
    def lock(self) -> threading.RLock:
        """Re-entrant lock held for the duration of every dispatch."""
        return self._lock

    def get_state(self) -> SimulatorState:
        return self._state

    def replay(self) -> SimulatorState:
        """Rebuild the current state from the store's start state and action log.

        Uses this store's own reducer, so history limits are applied exactly
        as they were during dispatch.
        """
        with self._lock:
            return replay(self._actions, reducer=self._reducer, state=self._initial_state)

    def subscribe(self, listener: Listener) -> Subscription:
        """Call ``listener(state)`` after every dispatch that changes the state."""
        subscription = Subscription(self, next(self._ids), listener)
        self._listeners[subscription.id] = listener
        return subscription

    def dispatch(self, action: Action) -> Action:
        """Reduce ``action`` into the state and notify subscribers.

        Listeners run in subscription order, after the new state is
        committed. An exception from a listener propagates to the caller;
        the state change stands.
        """
        self.dispatch_batch([action])
        return action

    def dispatch_batch(self, actions: Iterable[Action]) -> SimulatorState:
        """Reduce several actions as one update.

        Every action is logged, but listeners are notified at most once,
        with the final state.

        Returns:
            The state after the last action.
        """
        with self._lock:
            start = self._state
            for action in actions:
                self._reduce(action)
            if self._state is not start:
                for listener in list(self._listeners.values()):
                    listener(self._state)
            return self._state

    def _reduce(self, action: Action) -> None:
        previous = self._state
        self._state = self._reducer(previous, action)
        self._actions.append(action)

        if self._enable_logging:
            logger.debug(
                "action %s: marking %s -> %s",
                action.type.value,
                dict(previous.marking.present),
                dict(self._state.marking.present),
            )
