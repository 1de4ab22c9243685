"""Plain-text views of a player's match, shared by prompts and the heuristic."""
from __future__ import annotations

from collections import Counter
from typing import Dict, List

from domain.models import Side, TransactionLogEntry
from narrative.base import PlayerContext


def news_history_text(ctx: PlayerContext) -> str:
    return "\n".join(
        f'Round {r}: "{card.title}" ({card.sentiment.value}) - Affected: '
        f'{", ".join(s.value for s in card.affected_sectors)}'
        for r, card in ctx.news_history)


def trades_by_round(
        trades: List[TransactionLogEntry]) -> Dict[int, List[TransactionLogEntry]]:
    out: Dict[int, List[TransactionLogEntry]] = {}
    for t in trades:
        out.setdefault(t.round, []).append(t)
    return out


def trade_analysis_text(ctx: PlayerContext) -> str:
    blocks = []
    for round_no, trades in sorted(trades_by_round(list(ctx.trades)).items()):
        card = ctx.news_for_round(round_no)
        news = (f'News: "{card.title}" ({card.sentiment.value})'
                if card else "No news")
        lines = "\n".join(
            f"  - {t.side.value} {t.quantity:.2f} {t.asset_id} @ ${t.price:.2f} "
            f"({t.asset_class.value})" for t in trades)
        blocks.append(f"Round {round_no} - {news}\n{lines}")
    return "\n\n".join(blocks) or "No trades made"


def identify_patterns(trades: List[TransactionLogEntry]) -> List[str]:
    """Behavioural patterns in a transaction log, in a fixed order."""
    if not trades:
        return ["No trades made (passive strategy)"]

    patterns = []
    n = len(trades)

    with_news = sum(1 for t in trades if t.event_id)
    if with_news > n * 0.7:
        patterns.append("Highly reactive to news (70%+ trades during news events)")
    elif with_news < n * 0.3:
        patterns.append(
            "Ignored news signals (less than 30% trades aligned with news)")

    unique_assets = len({t.asset_id for t in trades})
    if unique_assets >= 5:
        patterns.append(f"Well diversified (traded {unique_assets} different assets)")
    elif unique_assets <= 2:
        patterns.append(f"Concentrated portfolio (only {unique_assets} assets)")

    # most_common keeps first-seen order on ties
    asset_class, count = Counter(t.asset_class for t in trades).most_common(1)[0]
    if count > n * 0.6:
        patterns.append(
            f"Heavy focus on {asset_class.value} ({count / n * 100:.0f}% of trades)")

    buys = sum(1 for t in trades if t.side == Side.BUY)
    sells = n - buys
    if buys > sells * 2:
        patterns.append("Aggressive buyer (bought much more than sold)")
    elif sells > buys * 2:
        patterns.append("Frequent profit-taker (sold much more than bought)")

    early = sum(1 for t in trades if t.round <= 2)
    late = sum(1 for t in trades if t.round >= 4)
    if early > late * 2:
        patterns.append("Early mover (most trades in first 2 rounds)")
    elif late > early * 2:
        patterns.append("Late trader (most activity in final rounds)")

    return patterns
