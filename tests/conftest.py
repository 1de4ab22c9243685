# tests/conftest.py
from __future__ import annotations

import random

import pytest

from domain.engine import MatchEngine
from domain.models import MatchState, Phase, PlayerState


class RecordingSink(list):
    """Collects every payload the engine publishes."""

    def of_type(self, ptype: str):
        return [p for p in self if p.get("type") == ptype]


def run_pre_match(engine: MatchEngine, limit: int = 100):
    for _ in range(limit):
        if engine.state.phase != Phase.PRE_MATCH:
            return
        engine.tick()
    raise AssertionError("pre-match never ended")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(sink) -> MatchEngine:
    return MatchEngine(publish=sink.append, rng=random.Random(7))


@pytest.fixture
def playing_engine(engine) -> MatchEngine:
    """Two players, pre-match run out by the clock, round 1 just started."""
    engine.join("u1", "alice")
    engine.join("u2", "bob")
    engine.start()
    run_pre_match(engine)
    assert engine.state.phase == Phase.PLAYING
    return engine


@pytest.fixture
def trading_state() -> MatchState:
    """A bare PLAYING state with one player, no news, for ledger tests."""
    state = MatchState("test-match")
    state.phase = Phase.PLAYING
    state.current_round = 1
    state.players.append(PlayerState("u1", "alice", state.starting_cash))
    return state
