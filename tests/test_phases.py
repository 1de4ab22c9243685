import random

import config
from domain import phases
from domain.catalog import SCENARIOS, AvatarId, StrategyId
from domain.models import MatchState, Phase, PlayerState, SubPhase
from domain.phases import NEXT_SUB_PHASE, SUB_PHASE_SECONDS, TickOutcome


def fresh(players=1):
    state = MatchState("m")
    for i in range(players):
        state.players.append(PlayerState(f"u{i}", f"p{i}", state.starting_cash))
    return state


def test_transition_table_covers_every_sub_phase():
    assert set(NEXT_SUB_PHASE) == set(SubPhase)
    assert set(SUB_PHASE_SECONDS) == set(SubPhase)
    order = [SubPhase.INTRO]
    while NEXT_SUB_PHASE[order[-1]] is not None:
        order.append(NEXT_SUB_PHASE[order[-1]])
    assert order == [SubPhase.INTRO, SubPhase.AVATAR_SELECTION,
                     SubPhase.STRATEGY_SELECTION, SubPhase.SCENARIO_TEASER]


def test_idle_pre_match_does_not_tick():
    state = fresh()
    assert phases.tick(state, random.Random(0)) == TickOutcome.IDLE
    assert state.sub_phase == SubPhase.INTRO


def test_countdown_advances_on_expiry():
    state, rng = fresh(), random.Random(0)
    assert phases.start_pre_match(state, rng)
    assert not phases.start_pre_match(state, rng)
    assert state.time_remaining == config.INTRO_SECONDS
    for _ in range(config.INTRO_SECONDS - 1):
        phases.tick(state, rng)
        assert state.sub_phase == SubPhase.INTRO
    phases.tick(state, rng)
    assert state.sub_phase == SubPhase.AVATAR_SELECTION
    assert state.time_remaining == config.AVATAR_SELECTION_SECONDS


def test_total_pre_match_length():
    state, rng = fresh(), random.Random(0)
    phases.start_pre_match(state, rng)
    ticks = 0
    while state.phase == Phase.PRE_MATCH:
        phases.tick(state, rng)
        ticks += 1
    assert ticks == sum(SUB_PHASE_SECONDS.values())
    assert state.current_round == 1
    assert not state.countdown_active


def test_selection_completes_sub_phase_early():
    state, rng = fresh(players=2), random.Random(0)
    phases.start_pre_match(state, rng)
    phases.advance_pre_match(state, rng)
    assert state.sub_phase == SubPhase.AVATAR_SELECTION

    state.players[0].avatar_id = AvatarId.BULL
    assert not phases.all_selected(state)
    state.players[1].avatar_id = AvatarId.FOX
    assert phases.all_selected(state)

    phases.advance_pre_match(state, rng)
    assert not phases.all_selected(state)
    for p in state.players:
        p.strategy_id = StrategyId.DIVERSIFIER
    assert phases.all_selected(state)


def test_scenario_chosen_when_teaser_starts():
    state, rng = fresh(), random.Random(0)
    phases.start_pre_match(state, rng)
    assert state.active_scenario is None
    for _ in range(3):
        phases.advance_pre_match(state, rng)
    assert state.sub_phase == SubPhase.SCENARIO_TEASER
    assert state.active_scenario in SCENARIOS


def test_news_phase_freezes_prices_then_trading_moves_them():
    state, rng = fresh(), random.Random(4)
    phases.start_game(state, rng)
    start = {a.id: a.price for a in state.assets}
    for _ in range(config.NEWS_PHASE_TICKS):
        phases.tick(state, rng)
    assert {a.id: a.price for a in state.assets} == start
    phases.tick(state, rng)
    assert {a.id: a.price for a in state.assets} != start


def test_full_match_rounds_and_finish():
    state, rng = fresh(), random.Random(11)
    phases.start_game(state, rng)
    rounds_seen = [state.current_round]
    finished = 0
    fear_rounds = set()
    for _ in range(config.ROUND_TICKS * config.GAME_ROUNDS + 10):
        outcome = phases.tick(state, rng)
        if outcome == TickOutcome.FINISHED:
            finished += 1
        if state.fear_zone_active:
            fear_rounds.add(state.current_round)
        if state.current_round != rounds_seen[-1]:
            rounds_seen.append(state.current_round)
        for a in state.assets:
            base = state.round_start_prices[a.id]
            assert base * 0.75 - 1e-9 <= a.price <= base * 1.25 + 1e-9
            assert a.price >= config.MIN_PRICE_THRESHOLD
    assert rounds_seen == [1, 2, 3, 4, 5]
    assert finished == 1
    assert state.phase == Phase.FINISHED
    assert fear_rounds == {5}
    assert len(state.news_history) == 5
    assert [r for r, _ in state.news_history] == [1, 2, 3, 4, 5]


def test_round_start_resets_base_prices_and_timer():
    state, rng = fresh(), random.Random(2)
    phases.start_game(state, rng)
    for _ in range(config.ROUND_TICKS):
        phases.tick(state, rng)
    assert state.current_round == 2
    assert state.frame == 0
    assert state.time_remaining == config.ROUND_TICKS
    assert state.round_start_prices == {a.id: a.price for a in state.assets}
