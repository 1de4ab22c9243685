import asyncio
import json
import random

import pytest
from fastapi.testclient import TestClient

from domain.engine import MatchEngine
from domain.models import Phase
from main import create_app
from realtime.endpoints import dispatch
from realtime.ticker import MatchTicker


@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c


def test_health_and_catalog(client):
    assert client.get("/health").json() == {"status": "ok", "phase": "PRE_MATCH"}
    catalog = client.get("/api/catalog").json()
    assert {"assets", "avatars", "strategies"} <= set(catalog)


def test_state_and_results_routes(client):
    state = client.get("/api/state").json()
    assert state["type"] == "GAME_STATE"
    assert state["phase"] == "PRE_MATCH"
    assert client.get("/api/results").status_code == 404


def test_websocket_join_broadcasts_state(client):
    with client.websocket_connect("/ws?userId=abc") as ws:
        assert ws.receive_json() == {"type": "HELLO", "userId": "abc"}
        assert ws.receive_json()["type"] == "GAME_STATE"
        ws.send_json({"type": "JOIN", "name": "alice"})
        state = ws.receive_json()
        assert [p["name"] for p in state["players"]] == ["alice"]
        ws.send_json({"type": "PING"})
        assert ws.receive_json()["type"] == "PONG"


def test_dispatch_routes_commands(sink):
    engine = MatchEngine(publish=sink.append, rng=random.Random(1))
    assert dispatch(engine, "u1", {"type": "JOIN", "name": "alice"})
    assert dispatch(engine, "u1", {"type": "START_MATCH"})
    assert not dispatch(engine, "u1", {"type": "BUY", "assetId": "tcs", "qty": "x"})
    assert not dispatch(engine, "u1", {"type": "DANCE"})
    assert dispatch(engine, "u1", {"type": "USE_POWER_UP", "powerUpId": "bailout"})


def test_ticker_drives_a_whole_match(sink):

    async def run():
        engine = MatchEngine(publish=sink.append, rng=random.Random(9))
        ticker = MatchTicker(engine, interval=0.001)
        engine.attach_clock(ticker)
        engine.join("u1", "alice")
        engine.start()
        first = ticker._task
        engine.start()  # already counting down, must not spawn a second clock
        assert ticker._task is first
        await asyncio.wait_for(first, timeout=30)
        return engine

    engine = asyncio.run(run())
    assert engine.state.phase == Phase.FINISHED
    assert sink[-1]["type"] == "GAME_OVER"
    assert len(sink.of_type("GAME_OVER")) == 1


def test_restart_cancels_previous_clock(sink):

    async def run():
        engine = MatchEngine(publish=sink.append)
        ticker = MatchTicker(engine, interval=10)
        ticker.start()
        first = ticker._task
        ticker.start()
        await asyncio.sleep(0)
        assert first.cancelled()
        assert ticker.running
        ticker.stop()
        assert not ticker.running

    asyncio.run(run())


@pytest.mark.parametrize("raw", ['{"type": "BUY", "assetId": "tcs", "qty": NaN}',
                                 '{"type": "SELL", "assetId": "tcs", "qty": "nan"}',
                                 '{"type": "BUY", "assetId": "tcs", "qty": Infinity}'])
def test_non_finite_quantities_are_rejected(playing_engine, raw):
    pl = playing_engine.state.player("u1")
    assert not dispatch(playing_engine, "u1", json.loads(raw))
    assert pl.cash == 10_000
    assert pl.holdings == [] and pl.transaction_log == []
