import json

import pytest
from pydantic import ValidationError

from domain.catalog import NEWS_CARDS, AssetClass, StrategyId
from domain.models import Side, TransactionLogEntry
from narrative.base import PlayerContext
from narrative.context import identify_patterns, trade_analysis_text
from narrative.gemini import build_narrator, build_prompt, parse_response
from narrative.heuristic import HeuristicNarrator, heuristic_analysis


def trade(round_no, side, asset_id, asset_class=AssetClass.STOCK, event="e1"):
    return TransactionLogEntry(round=round_no, side=side, asset_id=asset_id,
                               asset_class=asset_class, quantity=2, price=10.0,
                               total_value=20.0, event_id=event,
                               sentiment_at_time=0.0)


def context(trades=(), roi=0.0, risk=0):
    return PlayerContext(player_name="alice", starting_cash=10_000,
                         final_value=10_000 * (1 + roi / 100), roi=roi,
                         risk_score=risk, total_rounds=5,
                         strategy=StrategyId.UNSELECTED,
                         news_history=((1, NEWS_CARDS[0]), (2, NEWS_CARDS[1])),
                         trades=tuple(trades))


def test_passive_player():
    assert identify_patterns([]) == ["No trades made (passive strategy)"]
    summary = heuristic_analysis(context()).playerSummary
    assert summary.whatYouDidWell == ["You completed the game"]
    assert any("didn't make any trades" in m
               for m in summary.mistakesAndOpportunities)


def test_patterns_cover_news_concentration_skew_and_timing():
    trades = [trade(1, Side.BUY, "tcs"), trade(1, Side.BUY, "infy"),
              trade(2, Side.BUY, "tcs"), trade(2, Side.SELL, "tcs")]
    patterns = identify_patterns(trades)
    assert patterns == [
        "Highly reactive to news (70%+ trades during news events)",
        "Concentrated portfolio (only 2 assets)",
        "Heavy focus on STOCK (100% of trades)",
        "Aggressive buyer (bought much more than sold)",
        "Early mover (most trades in first 2 rounds)",
    ]


def test_late_diversified_seller():
    assets = [("sol", AssetClass.CRYPTO), ("us-treasury", AssetClass.BOND),
              ("tcs", AssetClass.STOCK), ("gold-bees", AssetClass.ETF),
              ("hdfc", AssetClass.STOCK)]
    trades = [trade(5, Side.SELL, a, c, event=None) for a, c in assets]
    trades.append(trade(4, Side.BUY, "sol", AssetClass.CRYPTO, event=None))
    patterns = identify_patterns(trades)
    assert patterns == [
        "Ignored news signals (less than 30% trades aligned with news)",
        "Well diversified (traded 5 different assets)",
        "Frequent profit-taker (sold much more than bought)",
        "Late trader (most activity in final rounds)",
    ]
    summary = heuristic_analysis(context(trades)).playerSummary
    assert "Frequent profit-taker (sold much more than bought)" in \
        summary.whatYouDidWell
    assert any(m.startswith("Late trader") for m in summary.mistakesAndOpportunities)


def test_early_aggressive_buyer_is_reflected_in_summary():
    trades = [trade(1, Side.BUY, a) for a in ("tcs", "infy", "hdfc",
                                               "sbi", "sol", "ltc")]
    summary = heuristic_analysis(context(trades)).playerSummary
    assert "Early mover (most trades in first 2 rounds)" in summary.whatYouDidWell
    assert any(m.startswith("Aggressive buyer")
               for m in summary.mistakesAndOpportunities)
    assert "Lock in gains by selling part of a winning position" in \
        summary.improvementSuggestions
    for items in (summary.whatYouDidWell, summary.mistakesAndOpportunities,
                  summary.improvementSuggestions):
        assert len(items) <= 4


def test_heuristic_is_deterministic_and_bounded():
    trades = [trade(r, Side.BUY, f"a{r}", event=None) for r in range(1, 6)]
    ctx = context(trades, roi=-3.0, risk=85)
    first = heuristic_analysis(ctx)
    assert heuristic_analysis(ctx) == first
    summary = first.playerSummary
    for items in (summary.whatYouDidWell, summary.mistakesAndOpportunities,
                  summary.improvementSuggestions):
        assert 1 <= len(items) <= 4
    assert "Your portfolio had high risk exposure (70+ risk score)" in \
        summary.mistakesAndOpportunities
    assert len(first.learningCards) == 2


def test_heuristic_narrator_is_async_wrapper():
    import asyncio
    ctx = context([trade(1, Side.BUY, "tcs")], roi=8.0)
    result = asyncio.run(HeuristicNarrator().analyze(ctx))
    assert "You achieved a positive ROI of 8.0%" in result.playerSummary.whatYouDidWell


def test_trade_analysis_groups_by_round_with_news():
    text = trade_analysis_text(context([trade(2, Side.SELL, "tcs")]))
    assert text.startswith(f'Round 2 - News: "{NEWS_CARDS[1].title}"')
    assert "SELL 2.00 tcs @ $10.00 (STOCK)" in text
    assert trade_analysis_text(context()) == "No trades made"


def test_prompt_includes_context():
    prompt = build_prompt(context([trade(1, Side.BUY, "tcs")], roi=12.5, risk=40))
    assert "ROI: 12.5%" in prompt
    assert "Risk Score: 40/100" in prompt
    assert "Strategy: None selected" in prompt
    assert NEWS_CARDS[0].title in prompt


def test_parse_response_strips_fences():
    body = {
        "playerSummary": {
            "whatYouDidWell": ["a"],
            "mistakesAndOpportunities": ["b"],
            "improvementSuggestions": ["c"],
        },
        "learningCards": [{"title": "t", "text": "x", "deepDive": "d",
                           "searchQuery": "q"}],
    }
    analysis = parse_response(f"```json\n{json.dumps(body)}\n```")
    assert analysis.playerSummary.whatYouDidWell == ["a"]


@pytest.mark.parametrize("text", ["not json", "{}", '{"playerSummary": {}}'])
def test_parse_response_rejects_malformed(text):
    with pytest.raises(ValidationError):
        parse_response(text)


def test_without_api_key_heuristic_is_selected():
    assert build_narrator(api_key=None).name == "heuristic"
    assert build_narrator(api_key="k").name == "gemini"
