"""Tests for PetriNetSimulator - the facade driven by front ends."""

from __future__ import annotations

import logging

import pytest
from pyrsistent import pmap

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
from tests.conftest import producer_consumer_model, two_place_model


def _names(sim: PetriNetSimulator) -> list[str]:
    return [entry.transition_name for entry in sim.sequence()]


class TestCreation:
    def test_starts_at_initial_marking_with_empty_sequence(self, sim, model):
        assert sim.marking() == model.m0
        assert list(sim.sequence()) == []
        assert sim.model is model

    def test_accepts_plain_dict_model(self):
        sim = PetriNetSimulator(two_place_model().to_dict())

        assert dict(sim.marking()) == {"p0": 1, "p1": 0}

    def test_rejects_invalid_model(self):
        bad = Model(places=["p0"], transitions=[], m0={"p0": -1})

        with pytest.raises(InvalidModelError):
            PetriNetSimulator(bad)

    @pytest.mark.parametrize("limit", [0, -5])
    def test_rejects_non_positive_history_limit(self, model, limit):
        with pytest.raises(ValueError, match="history_limit"):
            PetriNetSimulator(model, history_limit=limit)

    def test_initial_marking_is_not_undoable(self, sim, model):
        assert not sim.can_undo
        assert not sim.can_redo

        sim.undo()

        assert sim.marking() == model.m0

    def test_simulators_do_not_share_state(self, model):
        a = PetriNetSimulator(model)
        b = PetriNetSimulator(model)

        a.fire("t1")

        assert dict(a.marking()) == {"p0": 0, "p1": 2}
        assert dict(b.marking()) == {"p0": 1, "p1": 0}
        assert list(b.sequence()) == []


class TestTwoPlaceScenario:
    def test_fire_t1_moves_and_doubles_token(self, sim):
        marking = sim.fire("t1")

        assert dict(marking) == {"p0": 0, "p1": 2}
        assert dict(sim.marking()) == {"p0": 0, "p1": 2}
        assert list(sim.sequence()) == [SequenceEntry(transition_name="t1", binding=None)]

    def test_fire_t1_twice_is_rejected_without_state_change(self, sim):
        sim.fire("t1")
        before = sim.state
        actions_before = len(sim.actions)

        with pytest.raises(NotFireableError):
            sim.fire("t1")

        assert sim.state is before
        assert len(sim.actions) == actions_before
        assert _names(sim) == ["t1"]

    def test_fire_t0_then_undo(self, sim):
        sim.fire("t1")
        sim.fire("t0")
        assert dict(sim.marking()) == {"p0": 1, "p1": 1}

        sim.undo()

        assert dict(sim.marking()) == {"p0": 0, "p1": 2}
        assert _names(sim) == ["t1"]

    def test_fire_accepts_transition_records(self, sim, model):
        sim.fire(model.transition("t1"))

        assert _names(sim) == ["t1"]

    def test_fire_unknown_name_raises_key_error(self, sim):
        with pytest.raises(KeyError):
            sim.fire("t7")

    def test_fire_rejects_other_argument_types(self, sim):
        with pytest.raises(TypeError, match="fire\\(\\) expects"):
            sim.fire(3)

    def test_fire_with_transition_outside_model_checks_places(self, sim):
        stray = Transition(name="stray", preconditions={"elsewhere": 1})

        with pytest.raises(UnknownPlaceError):
            sim.fire(stray)
        assert list(sim.sequence()) == []


class TestUndoRedo:
    def test_undo_n_times_returns_to_initial_state(self):
        sim = PetriNetSimulator(producer_consumer_model())
        m0 = sim.marking()
        for name in ["produce", "produce", "consume", "produce", "consume"]:
            sim.fire(name)
        final_marking, final_sequence = sim.marking(), sim.sequence()

        for _ in range(5):
            sim.undo()
        assert sim.marking() == m0
        assert list(sim.sequence()) == []

        for _ in range(5):
            sim.redo()
        assert sim.marking() == final_marking
        assert sim.sequence() == final_sequence

    def test_fire_after_undo_discards_redo_branch(self, sim):
        sim.fire("t1")
        sim.fire("t0")
        sim.undo()
        sim.undo()

        sim.fire("t1")
        before = sim.state
        sim.redo()

        assert sim.state is before
        assert not sim.can_redo
        assert _names(sim) == ["t1"]

    def test_failed_fire_keeps_redo_branch(self, sim):
        sim.fire("t1")
        sim.undo()

        with pytest.raises(NotFireableError):
            sim.fire("t0")
        sim.redo()

        assert _names(sim) == ["t1"]

    def test_undo_redo_return_current_marking(self, sim):
        sim.fire("t1")

        assert dict(sim.undo()) == {"p0": 1, "p1": 0}
        assert dict(sim.redo()) == {"p0": 0, "p1": 2}

    def test_single_undo_after_self_loop_fire(self):
        sim = PetriNetSimulator(
            Model.from_dict(
                {
                    "places": ["a"],
                    "transitions": [
                        {"name": "loop", "preconditions": {"a": 1}, "postconditions": {"a": 1}},
                        {"name": "drain", "preconditions": {"a": 1}},
                    ],
                    "m0": {"a": 2},
                }
            )
        )
        sim.fire("drain")
        sim.fire("loop")

        sim.undo()

        assert dict(sim.marking()) == {"a": 1}
        assert _names(sim) == ["drain"]

    def test_jump_moves_both_slices(self, sim):
        sim.fire("t1")
        sim.fire("t0")
        sim.fire("t0")

        sim.jump(-2)
        assert _names(sim) == ["t1"]
        assert dict(sim.marking()) == {"p0": 0, "p1": 2}

        sim.jump(5)
        assert _names(sim) == ["t1", "t0", "t0"]
        assert dict(sim.marking()) == {"p0": 2, "p1": 0}

    def test_history_limit_bounds_undo(self, model):
        sim = PetriNetSimulator(model, history_limit=1)
        sim.fire("t1")
        sim.fire("t0")

        sim.undo()
        sim.undo()

        assert dict(sim.marking()) == {"p0": 0, "p1": 2}
        assert _names(sim) == ["t1"]
        assert sim.history_limit == 1

    def test_reset_restores_initial_state(self, sim, model):
        sim.fire("t1")
        sim.fire("t0")

        sim.reset()

        assert sim.marking() == model.m0
        assert list(sim.sequence()) == []
        assert not sim.can_undo
        assert not sim.can_redo


class TestFireability:
    def test_is_fireable_by_name_and_record(self, sim, model):
        assert sim.is_fireable("t1")
        assert not sim.is_fireable(model.transition("t0"))

    def test_fireable_transitions_follow_marking(self, sim):
        assert [t.name for t in sim.fireable_transitions()] == ["t1"]

        sim.fire("t1")

        assert [t.name for t in sim.fireable_transitions()] == ["t0"]


class TestCustomSemantics:
    def test_choose_binding_is_recorded_in_sequence(self, model):
        semantics = FireSemantics(choose_binding=lambda t, m: f"{t.name}@{m['p0']}")
        sim = PetriNetSimulator(model, semantics=semantics)

        sim.fire("t1")

        assert list(sim.sequence()) == [SequenceEntry("t1", "t1@1")]

    def test_custom_fire_receives_binding(self, model):
        calls = []

        def capped_fire(transition, marking, binding):
            calls.append(binding)
            return {place: min(tokens, binding) for place, tokens in marking.items()}

        semantics = FireSemantics(fire=capped_fire, choose_binding=lambda t, m: 0)
        sim = PetriNetSimulator(model, semantics=semantics)

        sim.fire("t1")

        assert calls == [0]
        assert dict(sim.marking()) == {"p0": 0, "p1": 0}

    def test_custom_is_fireable_is_advisory_only(self, model):
        semantics = FireSemantics(is_fireable=lambda t, m: True)
        sim = PetriNetSimulator(model, semantics=semantics)

        assert sim.is_fireable("t0")
        with pytest.raises(NotFireableError):
            sim.fire("t0")

    def test_custom_fire_may_not_change_place_set(self, model):
        semantics = FireSemantics(fire=lambda t, m, b: m.set("p9", 1))
        sim = PetriNetSimulator(model, semantics=semantics)

        with pytest.raises(InvalidMarkingError):
            sim.fire("t1")
        assert sim.marking() == model.m0

    def test_custom_fire_returning_input_still_records_history(self, model):
        semantics = FireSemantics(fire=lambda t, m, b: m)
        sim = PetriNetSimulator(model, semantics=semantics)

        sim.fire("t0")
        sim.undo()

        assert list(sim.sequence()) == []
        assert sim.can_redo


class TestSubscribe:
    def test_listener_receives_simulator_after_each_change(self, sim):
        seen = []
        sim.subscribe(lambda s: seen.append(dict(s.marking())))

        sim.fire("t1")
        sim.undo()
        sim.undo()

        assert seen == [{"p0": 0, "p1": 2}, {"p0": 1, "p1": 0}]

    def test_failed_fire_does_not_notify(self, sim):
        seen = []
        sim.subscribe(lambda s: seen.append(s))

        with pytest.raises(NotFireableError):
            sim.fire("t0")

        assert seen == []

    def test_unsubscribe(self, sim):
        seen = []
        subscription = sim.subscribe(lambda s: seen.append(s))
        subscription.unsubscribe()

        sim.fire("t1")

        assert seen == []


def test_rejected_fire_is_logged(sim, caplog):
    with caplog.at_level(logging.DEBUG, logger="pypetri.core.simulator"):
        with pytest.raises(NotFireableError):
            sim.fire("t0")

    assert "rejected" in caplog.text


def test_markings_are_immutable_snapshots(sim):
    first = sim.marking()
    sim.fire("t1")

    assert dict(first) == {"p0": 1, "p1": 0}
    assert first == pmap({"p0": 1, "p1": 0})


class TestReplay:
    def test_replay_reproduces_limited_history(self, model):
        sim = PetriNetSimulator(model, history_limit=1)
        sim.fire("t1")
        sim.fire("t0")
        sim.undo()

        replayed = sim.replay()

        assert replayed == sim.state
        assert len(replayed.marking.past) == len(replayed.sequence.past) == 0
        assert len(replayed.marking.future) == 1

    def test_replay_after_reset(self, sim):
        sim.fire("t1")
        sim.reset()
        sim.fire("t1")

        assert sim.replay() == sim.state


def test_reset_notifies_once_with_cleared_history(sim):
    seen = []
    sim.subscribe(lambda s: seen.append((s.can_undo, s.can_redo, dict(s.marking()))))
    sim.fire("t1")
    seen.clear()

    sim.reset()

    assert seen == [(False, False, {"p0": 1, "p1": 0})]
