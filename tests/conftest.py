"""Pytest configuration and shared models."""

from __future__ import annotations

import pytest

from pypetri.core import Model, PetriNetSimulator


def two_place_model() -> Model:
    """The ``p0``/``p1`` cycle: ``t1`` turns one p0 token into two p1 tokens."""
    return Model.from_dict(
        {
            "places": ["p0", "p1"],
            "transitions": [
                {"name": "t1", "preconditions": {"p0": 1}, "postconditions": {"p1": 2}},
                {"name": "t0", "preconditions": {"p1": 1}, "postconditions": {"p0": 1}},
            ],
            "m0": {"p0": 1, "p1": 0},
        }
    )


def producer_consumer_model(buffer: int = 0) -> Model:
    """Producer/consumer with a bounded buffer of capacity 2."""
    return Model.from_dict(
        {
            "places": ["ready", "buffer", "free", "consumed"],
            "transitions": [
                {
                    "name": "produce",
                    "preconditions": {"ready": 1, "free": 1},
                    "postconditions": {"ready": 1, "buffer": 1},
                },
                {
                    "name": "consume",
                    "preconditions": {"buffer": 1},
                    "postconditions": {"free": 1, "consumed": 1},
                },
            ],
            "m0": {"ready": 1, "buffer": buffer, "free": 2 - buffer, "consumed": 0},
        }
    )


@pytest.fixture
def model() -> Model:
    return two_place_model()


@pytest.fixture
def sim(model: Model) -> PetriNetSimulator:
    return PetriNetSimulator(model)
