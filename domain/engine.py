# domain/engine.py
"""
The match engine: sole owner of the MatchState and the only code allowed to
mutate it.

All command handlers and `tick()` are synchronous and run on the event loop,
so no two of them can interleave. Each accepted mutation ends with exactly
one full-state broadcast through `publish`.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

import config
from domain import phases
from domain.catalog import AVATARS_BY_ID, STRATEGIES_BY_ID, AvatarId, StrategyId
from domain.execution import execute_buy, execute_sell
from domain.models import MatchState, Phase, PlayerState, SubPhase
from domain.phases import TickOutcome
from domain.portfolio import state_payload, use_power_up
from domain.results import PlayerResult, compose_results, results_payload
from narrative.base import NarrativeGenerator
from narrative.heuristic import HeuristicNarrator

logger = logging.getLogger(__name__)

MATCH_ID = "match-1"  # one match per engine


class NullClock:
    """Clock control that does nothing; tests drive `tick()` by hand."""

    def start(self):
        pass

    def stop(self):
        pass


class MatchEngine:

    def __init__(self,
                 publish: Callable[[dict], None],
                 narrator: Optional[NarrativeGenerator] = None,
                 rng: Optional[random.Random] = None,
                 clock=None,
                 starting_cash: float = config.STARTING_CASH,
                 analysis_timeout: float = config.ANALYSIS_TIMEOUT_SECONDS):
        self.publish = publish
        self.narrator = narrator or HeuristicNarrator()
        self.rng = rng or random.Random()
        self.clock = clock or NullClock()
        self.starting_cash = starting_cash
        self.analysis_timeout = analysis_timeout
        self.state = self._new_state()
        self.last_results: Optional[List[PlayerResult]] = None
        self._ticking = False

    def attach_clock(self, clock):
        self.clock = clock

    def _new_state(self) -> MatchState:
        return MatchState(MATCH_ID, self.starting_cash)

    def broadcast(self):
        self.publish(state_payload(self.state))

    # ---------- Players ----------
    def join(self, user_id: str, name: str) -> bool:
        name = (name or "").strip()
        if not name:
            return False
        existing = self.state.player_by_name(name)
        current = self.state.player(user_id)
        if existing:
            logger.info("player %s reconnected (%s -> %s)", name,
                        existing.user_id, user_id)
            if current is not None and current is not existing:
                # one connection, one player
                self.state.players.remove(current)
            existing.user_id = user_id
        elif current is not None:
            logger.info("player %s renamed to %s", current.name, name)
            current.name = name
        else:
            logger.info("player %s joined (%s)", name, user_id)
            self.state.players.append(
                PlayerState(user_id, name, self.state.starting_cash))
        self.broadcast()
        return True

    def leave(self, user_id: str) -> bool:
        pl = self.state.player(user_id)
        if pl is None:
            return False
        logger.info("player %s left", pl.name)
        self.state.players = [p for p in self.state.players
                              if p.user_id != user_id]
        if not self.state.players:
            logger.info("no players left, resetting match")
            self._reset()
        self.broadcast()
        return True

    def _select(self, user_id: str, sub_phase: SubPhase, apply) -> bool:
        pl = self.state.player(user_id)
        if (pl is None or self.state.phase != Phase.PRE_MATCH or
                self.state.sub_phase != sub_phase or
                not self.state.countdown_active):
            return False
        apply(pl)
        if phases.all_selected(self.state):
            phases.advance_pre_match(self.state, self.rng)
        self.broadcast()
        return True

    def select_avatar(self, user_id: str, avatar_id: str) -> bool:
        try:
            avatar = AvatarId(avatar_id)
        except ValueError:
            return False
        if avatar not in AVATARS_BY_ID:
            return False
        return self._select(user_id, SubPhase.AVATAR_SELECTION,
                            lambda pl: setattr(pl, "avatar_id", avatar))

    def select_strategy(self, user_id: str, strategy_id: str) -> bool:
        try:
            strategy = StrategyId(strategy_id)
        except ValueError:
            return False
        if strategy not in STRATEGIES_BY_ID:
            return False
        return self._select(user_id, SubPhase.STRATEGY_SELECTION,
                            lambda pl: setattr(pl, "strategy_id", strategy))

    # ---------- Trading ----------
    def buy(self, user_id: str, asset_id: str, quantity: float) -> bool:
        ok, reason = execute_buy(self.state, user_id, asset_id, quantity)
        if not ok:
            logger.debug("buy %s x%s by %s rejected: %s", asset_id, quantity,
                         user_id, reason)
            return False
        self.broadcast()
        return True

    def sell(self, user_id: str, asset_id: str, quantity: float) -> bool:
        ok, reason = execute_sell(self.state, user_id, asset_id, quantity)
        if not ok:
            logger.debug("sell %s x%s by %s rejected: %s", asset_id, quantity,
                         user_id, reason)
            return False
        self.broadcast()
        return True

    def use_power_up(self, user_id: str, power_up_id: str) -> bool:
        pl = self.state.player(user_id)
        if pl is None or not use_power_up(pl, power_up_id):
            return False
        self.broadcast()
        return True

    # ---------- Lifecycle ----------
    def start(self) -> bool:
        if not phases.start_pre_match(self.state, self.rng):
            return False
        self.clock.start()
        self.broadcast()
        return True

    def _reset(self):
        self.clock.stop()
        players = [(p.user_id, p.name) for p in self.state.players]
        self.state = self._new_state()
        self.state.players = [
            PlayerState(uid, name, self.state.starting_cash)
            for uid, name in players
        ]
        self.last_results = None

    def reset(self):
        logger.info("resetting match")
        self._reset()
        self.broadcast()

    def request_reset(self):
        """Play again: fresh state, then straight into the pre-match intro."""
        self.reset()
        self.start()

    def tick(self) -> TickOutcome:
        # guards direct re-entry, e.g. from a publish callback
        if self._ticking:
            return TickOutcome.IDLE
        self._ticking = True
        try:
            outcome = phases.tick(self.state, self.rng)
            if outcome != TickOutcome.IDLE:
                self.broadcast()
        finally:
            self._ticking = False
        return outcome

    async def publish_results(self) -> Optional[List[PlayerResult]]:
        """Compose and publish the ranked results of a finished match.

        The FINISHED state has already been broadcast by the tick that ended
        the match. Results are dropped if the match was reset meanwhile.
        """
        state = self.state
        if state.phase != Phase.FINISHED:
            return None
        results = await compose_results(state, self.narrator,
                                        self.analysis_timeout)
        if self.state is not state:
            logger.info("match %s was reset before results were ready",
                        state.match_id)
            return None
        self.last_results = results
        self.publish(results_payload(results))
        return results
