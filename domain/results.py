# domain/results.py
"""
End-of-match scoring, ranking and per-player narrative analysis.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Tuple

import config
from domain.catalog import StrategyId
from domain.models import MatchState, PlayerState
from narrative.base import Analysis, NarrativeGenerator, PlayerContext
from narrative.heuristic import heuristic_analysis

logger = logging.getLogger(__name__)


@dataclass
class PlayerResult:
    player_id: str
    player_name: str
    final_value: float
    risk_score: int
    roi: float
    risk_adjusted_score: float
    analysis: Analysis
    analysis_source: str
    rank: int = 0

    def to_dict(self) -> dict:
        summary = self.analysis.playerSummary
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "finalValue": round(self.final_value, 2),
            "riskScore": self.risk_score,
            "roi": round(self.roi, 2),
            "riskAdjustedScore": round(self.risk_adjusted_score, 2),
            "rank": self.rank,
            "insights": summary.whatYouDidWell + summary.mistakesAndOpportunities,
            "playerSummary": summary.model_dump(),
            "learningCards": [c.model_dump() for c in self.analysis.learningCards],
            "analysisSource": self.analysis_source,
        }


def final_value_with_bonus(pl: PlayerState) -> float:
    value = pl.total_value
    if pl.strategy_id == StrategyId.DIVERSIFIER:
        distinct = len({h.asset_id for h in pl.holdings})
        if distinct >= config.DIVERSIFIER_MIN_ASSETS:
            value += value * config.DIVERSIFIER_BONUS
    return value


def roi_percent(final_value: float, starting_cash: float) -> float:
    return (final_value - starting_cash) / starting_cash * 100


def risk_adjusted(roi: float, risk_score: int) -> float:
    return roi - risk_score * config.RISK_PENALTY_WEIGHT


def player_context(state: MatchState, pl: PlayerState, final_value: float,
                   roi: float) -> PlayerContext:
    return PlayerContext(
        player_name=pl.name,
        starting_cash=state.starting_cash,
        final_value=final_value,
        roi=roi,
        risk_score=pl.risk_score,
        total_rounds=state.max_rounds,
        strategy=pl.strategy_id,
        news_history=tuple(state.news_history),
        trades=tuple(pl.transaction_log),
    )


async def analyze_with_fallback(narrator: NarrativeGenerator,
                                ctx: PlayerContext,
                                timeout: float) -> Tuple[Analysis, str]:
    try:
        analysis = await asyncio.wait_for(narrator.analyze(ctx), timeout)
        return analysis, narrator.name
    except asyncio.TimeoutError:
        logger.warning("%s analysis for %s timed out after %.1fs, using heuristic",
                       narrator.name, ctx.player_name, timeout)
    except Exception as e:
        logger.warning("%s analysis for %s failed (%s), using heuristic",
                       narrator.name, ctx.player_name, e)
    return heuristic_analysis(ctx), "heuristic"


def rank_results(results: List[PlayerResult]) -> List[PlayerResult]:
    # sorted() is stable, so ties keep player order
    ranked = sorted(results, key=lambda r: r.risk_adjusted_score, reverse=True)
    for i, r in enumerate(ranked):
        r.rank = i + 1
    return ranked


async def compose_results(state: MatchState,
                          narrator: NarrativeGenerator,
                          timeout: float = config.ANALYSIS_TIMEOUT_SECONDS
                          ) -> List[PlayerResult]:
    """Score, analyse and rank every player of a finished match.

    Scores are taken before any await, so later changes to `state` cannot
    leak into a result. Analyses run concurrently, each bounded by `timeout`.
    """
    scored = []
    for pl in state.players:
        final_value = final_value_with_bonus(pl)
        roi = roi_percent(final_value, state.starting_cash)
        scored.append((pl.user_id, pl.name, final_value, pl.risk_score, roi,
                       player_context(state, pl, final_value, roi)))

    analyses = await asyncio.gather(*(
        analyze_with_fallback(narrator, ctx, timeout) for *_, ctx in scored))

    results = [
        PlayerResult(player_id=uid,
                     player_name=name,
                     final_value=final_value,
                     risk_score=risk,
                     roi=roi,
                     risk_adjusted_score=risk_adjusted(roi, risk),
                     analysis=analysis,
                     analysis_source=source)
        for (uid, name, final_value, risk, roi, _), (analysis, source)
        in zip(scored, analyses)
    ]
    return rank_results(results)


def results_payload(results: List[PlayerResult]) -> dict:
    return {"type": "GAME_OVER", "results": [r.to_dict() for r in results]}
