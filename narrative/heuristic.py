"""
Local, deterministic match analysis.

Used whenever the remote generator is not configured or fails. The output
depends only on the player context, so the same transaction log always
produces the same text.
"""
from __future__ import annotations

from typing import List

from narrative.base import (Analysis, LearningCard, NarrativeGenerator,
                            PlayerContext, PlayerSummary)
from narrative.context import identify_patterns

MAX_ITEMS = 4

LEARNING_CARDS = (
    LearningCard(
        title="News-Driven Trading",
        text=("Markets react strongly to news. Positive news drives prices up, "
              "negative news drives them down."),
        deepDive=("Professional traders monitor news constantly. The key is to "
                  "act quickly when news breaks, but also understand that news "
                  "impact fades over time (time decay). Buy the rumor, sell the "
                  "news."),
        searchQuery="how news affects stock prices",
    ),
    LearningCard(
        title="Diversification",
        text=("Don't put all your eggs in one basket. Spread investments across "
              "different asset types."),
        deepDive=("Diversification reduces risk because different assets react "
                  "differently to the same news. When stocks fall, bonds might "
                  "rise. When crypto crashes, gold might rally. A balanced "
                  "portfolio protects you from sector-specific crashes."),
        searchQuery="portfolio diversification strategy",
    ),
)


def _bounded(items: List[str], fallback: str) -> List[str]:
    return items[:MAX_ITEMS] if items else [fallback]


def heuristic_analysis(ctx: PlayerContext) -> Analysis:
    trades = list(ctx.trades)
    well: List[str] = []
    mistakes: List[str] = []
    suggestions: List[str] = []

    if trades:
        well.append("You actively participated in the market and made trades")
    else:
        mistakes.append("You didn't make any trades - missed all opportunities")
        suggestions.append("React to news events by buying affected assets")

    if ctx.roi > 5:
        well.append(f"You achieved a positive ROI of {ctx.roi:.1f}%")

    unique_assets = len({t.asset_id for t in trades})
    if unique_assets >= 4:
        well.append(f"You diversified across {unique_assets} different assets")
    elif trades and unique_assets <= 2:
        mistakes.append(
            f"Limited diversification - you only traded {unique_assets} assets")

    if ctx.risk_score > 70:
        mistakes.append("Your portfolio had high risk exposure (70+ risk score)")

    with_news = sum(1 for t in trades if t.event_id)
    if trades and with_news < len(trades) * 0.3:
        mistakes.append(
            "You ignored most news signals - under 30% of trades aligned with news")
        suggestions.append(
            "Pay attention to news cards and trade the affected sectors")

    for pattern in identify_patterns(trades):
        if pattern.startswith("Heavy focus"):
            mistakes.append(f"{pattern} - your results hinged on one asset class")
        elif pattern.startswith("Highly reactive"):
            well.append(pattern)
        elif pattern.startswith("Aggressive buyer"):
            mistakes.append(f"{pattern} - gains stayed on paper")
            suggestions.append(
                "Lock in gains by selling part of a winning position")
        elif pattern.startswith("Frequent profit-taker"):
            well.append(pattern)
        elif pattern.startswith("Early mover"):
            well.append(pattern)
            suggestions.append(
                "Keep some cash in reserve for news in the later rounds")
        elif pattern.startswith("Late trader"):
            mistakes.append(f"{pattern} - early news moves went unused")

    if ctx.roi < 0:
        suggestions.append(
            "Focus on buying during negative news and selling during positive news")
    suggestions.append(
        "Study the relationship between news sentiment and price movements")

    return Analysis(
        playerSummary=PlayerSummary(
            whatYouDidWell=_bounded(well, "You completed the game"),
            mistakesAndOpportunities=_bounded(
                mistakes, "Consider being more active in trading"),
            improvementSuggestions=_bounded(suggestions, ""),
        ),
        learningCards=list(LEARNING_CARDS),
    )


class HeuristicNarrator(NarrativeGenerator):

    async def analyze(self, context: PlayerContext) -> Analysis:
        return heuristic_analysis(context)

    @property
    def name(self) -> str:
        return "heuristic"
