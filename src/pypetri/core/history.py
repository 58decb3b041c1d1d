"""Undo/redo history for a single state slice.

``undoable(reducer)`` wraps a slice reducer into a reducer over
``HistoryFrame(past, present, future)``. Frames hold whole-value snapshots;
slices are small and immutable, so consecutive snapshots share structure.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pyrsistent import PRecord, PVector, field, pvector

from pypetri.core.actions import Action, ClearHistory, Jump, Redo, Undo

Reducer = Callable[[Any, Action], Any]
HistoryReducer = Callable[["HistoryFrame", Action], "HistoryFrame"]


class HistoryFrame(PRecord):
    """Past/present/future snapshots of one slice.

    Attributes:
        past: Prior values, oldest first.
        present: Current value.
        future: Undone values, next-to-redo first.
    """

    past = field(type=PVector, initial=pvector(), factory=pvector)
    present = field()
    future = field(type=PVector, initial=pvector(), factory=pvector)

    @property
    def can_undo(self) -> bool:
        return len(self.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.future) > 0

    def undo(self) -> HistoryFrame:
        """Return the frame one step back, or self when there is no past."""
        if not self.past:
            return self
        return HistoryFrame(
            past=self.past[:-1],
            present=self.past[-1],
            future=pvector([self.present]).extend(self.future),
        )

    def redo(self) -> HistoryFrame:
        """Return the frame one step forward, or self when there is no future."""
        if not self.future:
            return self
        return HistoryFrame(
            past=self.past.append(self.present),
            present=self.future[0],
            future=self.future[1:],
        )

    def jump(self, steps: int) -> HistoryFrame:
        """Undo (negative) or redo (positive) up to ``abs(steps)`` times."""
        frame = self
        if steps < 0:
            for _ in range(min(-steps, len(self.past))):
                frame = frame.undo()
        else:
            for _ in range(min(steps, len(self.future))):
                frame = frame.redo()
        return frame

    def clear(self) -> HistoryFrame:
        """Drop past and future, keeping present."""
        if not self.past and not self.future:
            return self
        return HistoryFrame(present=self.present)


def undoable(reducer: Reducer, *, limit: int | None = None) -> HistoryReducer:
    """Wrap ``reducer`` so its slice keeps undo/redo history.

    Any action other than ``Undo``/``Redo``/``Jump``/``ClearHistory`` is
    passed to ``reducer``. When the reducer returns a new value (by
    identity), the old present moves to ``past`` and ``future`` is
    cleared; otherwise the frame is returned unchanged.

    Args:
        reducer: Slice reducer ``(state, action) -> state``.
        limit: Max retained past entries. Use None for unbounded history.

    Returns:
        A reducer ``(HistoryFrame, action) -> HistoryFrame``.
    """
    if limit is not None and limit < 1:
        raise ValueError("history limit must be >= 1 or None")

    def reduce(frame: HistoryFrame, action: Action) -> HistoryFrame:
        match action:
            case Undo():
                return frame.undo()
            case Redo():
                return frame.redo()
            case Jump(steps=steps):
                return frame.jump(steps)
            case ClearHistory():
                return frame.clear()
            case _:
                present = reducer(frame.present, action)
                if present is frame.present:
                    return frame
                past = frame.past.append(frame.present)
                if limit is not None and len(past) > limit:
                    past = past[-limit:]
                return HistoryFrame(past=past, present=present, future=pvector())

    return reduce
