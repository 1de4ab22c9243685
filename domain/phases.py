# domain/phases.py
"""
Match phase controller.

PRE_MATCH.INTRO -> AVATAR_SELECTION -> STRATEGY_SELECTION -> SCENARIO_TEASER
-> PLAYING (rounds 1..max) -> FINISHED

The sub-phase order and durations live in plain tables; `tick()` is the only
time-driven entry point, so the whole flow can be driven by a fake clock.
"""
from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, Dict, Optional

import config
from domain.catalog import SCENARIOS, AvatarId, StrategyId
from domain.models import MatchState, Phase, PlayerState, SubPhase
from domain.portfolio import update_valuations
from domain.pricing import mark_round_start, step_prices
from domain.sentiment import (apply_news_sentiment, apply_sector_rotation,
                              draw_news, track_polarity)

logger = logging.getLogger(__name__)

SUB_PHASE_SECONDS: Dict[SubPhase, int] = {
    SubPhase.INTRO: config.INTRO_SECONDS,
    SubPhase.AVATAR_SELECTION: config.AVATAR_SELECTION_SECONDS,
    SubPhase.STRATEGY_SELECTION: config.STRATEGY_SELECTION_SECONDS,
    SubPhase.SCENARIO_TEASER: config.SCENARIO_TEASER_SECONDS,
}

# None means the pre-match is over and the game starts.
NEXT_SUB_PHASE: Dict[SubPhase, Optional[SubPhase]] = {
    SubPhase.INTRO: SubPhase.AVATAR_SELECTION,
    SubPhase.AVATAR_SELECTION: SubPhase.STRATEGY_SELECTION,
    SubPhase.STRATEGY_SELECTION: SubPhase.SCENARIO_TEASER,
    SubPhase.SCENARIO_TEASER: None,
}

# Sub-phases that end early once every player has made the selection.
SELECTION_DONE: Dict[SubPhase, Callable[[PlayerState], bool]] = {
    SubPhase.AVATAR_SELECTION: lambda p: p.avatar_id != AvatarId.UNSELECTED,
    SubPhase.STRATEGY_SELECTION:
        lambda p: p.strategy_id != StrategyId.UNSELECTED,
}


class TickOutcome(str, Enum):
    IDLE = "IDLE"          # nothing is running, no broadcast
    ADVANCED = "ADVANCED"
    FINISHED = "FINISHED"  # this tick ended the match


def enter_sub_phase(state: MatchState, sub_phase: SubPhase,
                    rng: random.Random):
    logger.info("pre-match sub-phase %s", sub_phase.value)
    state.sub_phase = sub_phase
    state.time_remaining = SUB_PHASE_SECONDS[sub_phase]
    if sub_phase == SubPhase.SCENARIO_TEASER:
        state.active_scenario = rng.choice(SCENARIOS)


def start_pre_match(state: MatchState, rng: random.Random) -> bool:
    if state.phase != Phase.PRE_MATCH or state.countdown_active:
        return False
    state.countdown_active = True
    enter_sub_phase(state, SubPhase.INTRO, rng)
    return True


def advance_pre_match(state: MatchState, rng: random.Random):
    nxt = NEXT_SUB_PHASE[state.sub_phase]
    if nxt is None:
        start_game(state, rng)
    else:
        enter_sub_phase(state, nxt, rng)


def all_selected(state: MatchState) -> bool:
    done = SELECTION_DONE.get(state.sub_phase)
    if done is None or not state.players:
        return False
    return all(done(p) for p in state.players)


def start_game(state: MatchState, rng: random.Random):
    logger.info("match %s starting", state.match_id)
    state.phase = Phase.PLAYING
    state.countdown_active = False
    state.current_round = 1
    state.fear_zone_active = False
    start_round(state, rng)


def start_round(state: MatchState, rng: random.Random):
    if state.current_round > state.max_rounds:
        finish(state)
        return

    if state.current_round == state.max_rounds:
        state.fear_zone_active = True

    mark_round_start(state)

    news = draw_news(rng)
    state.active_event = news
    state.news_history.append((state.current_round, news))
    track_polarity(state, news)
    logger.info("round %d news: %s (%s, consecutive %d) sectors=%s",
                state.current_round, news.title, news.sentiment.value,
                state.consecutive_same_polarity,
                ",".join(s.value for s in news.affected_sectors))

    apply_news_sentiment(state, news)
    apply_sector_rotation(state, news, rng)

    state.frame = 0
    state.time_remaining = config.ROUND_TICKS


def finish(state: MatchState):
    logger.info("match %s finished after round %d", state.match_id,
                state.current_round)
    state.phase = Phase.FINISHED
    state.countdown_active = False
    state.time_remaining = 0


def _tick_round(state: MatchState, rng: random.Random) -> TickOutcome:
    state.frame += 1
    state.time_remaining = max(0, config.ROUND_TICKS - state.frame)

    if state.frame > config.NEWS_PHASE_TICKS:
        step_prices(state, rng, state.frame - config.NEWS_PHASE_TICKS)
    update_valuations(state)

    if state.frame < config.ROUND_TICKS:
        return TickOutcome.ADVANCED
    if state.current_round + 1 > state.max_rounds:
        finish(state)
        return TickOutcome.FINISHED
    state.current_round += 1
    start_round(state, rng)
    return TickOutcome.ADVANCED


def tick(state: MatchState, rng: random.Random) -> TickOutcome:
    """Advance the match by one second."""
    if state.phase == Phase.PLAYING:
        return _tick_round(state, rng)
    if state.phase == Phase.PRE_MATCH and state.countdown_active:
        state.time_remaining -= 1
        if state.time_remaining <= 0:
            advance_pre_match(state, rng)
        return TickOutcome.ADVANCED
    return TickOutcome.IDLE
