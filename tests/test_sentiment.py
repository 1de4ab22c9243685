import random

import pytest

from domain.catalog import (NEWS_CARDS, AssetClass, NewsCard, Sector,
                            SentimentLabel)
from domain.models import Asset, MatchState
from domain.sentiment import (apply_news_sentiment, apply_sector_rotation,
                              impact_weight, sentiment_term, time_decay,
                              track_polarity)


def card(sentiment, *sectors) -> NewsCard:
    return NewsCard("t", "Test", "", sentiment, tuple(sectors))


def test_very_negative_tech_news_hits_stocks_and_rotates_the_rest():
    state = MatchState("m")
    news = card(SentimentLabel.VERY_NEGATIVE, Sector.TECHNOLOGY)

    apply_news_sentiment(state, news)
    assert state.sentiment[AssetClass.STOCK] == -20
    assert state.sentiment[AssetClass.CRYPTO] == 0

    rotated = apply_sector_rotation(state, news, random.Random(1))
    assert Sector.TECHNOLOGY not in rotated
    assert set(rotated) == set(Sector) - {Sector.TECHNOLOGY}
    # STOCK gets rotation drift via finance and energy but stays down
    assert -20 < state.sentiment[AssetClass.STOCK] < 0
    for asset_class in (AssetClass.CRYPTO, AssetClass.BOND, AssetClass.ETF):
        assert state.sentiment[asset_class] > 0


def test_rotation_drift_is_one_to_two_points_per_mapping():
    state = MatchState("m")
    apply_sector_rotation(state, card(SentimentLabel.NEGATIVE, Sector.FINANCE,
                                      Sector.ENERGY, Sector.TECHNOLOGY,
                                      Sector.BONDS, Sector.GOLD),
                          random.Random(2))
    assert 1 <= state.sentiment[AssetClass.CRYPTO] <= 2


def test_positive_news_does_not_rotate():
    state = MatchState("m")
    news = card(SentimentLabel.POSITIVE, Sector.CRYPTO)
    assert apply_sector_rotation(state, news, random.Random(1)) == []
    apply_news_sentiment(state, news)
    assert state.sentiment[AssetClass.CRYPTO] == 10
    assert state.sentiment[AssetClass.STOCK] == 0


def test_sentiment_is_clamped():
    state = MatchState("m")
    state.sentiment[AssetClass.STOCK] = -95
    apply_news_sentiment(state, card(SentimentLabel.VERY_NEGATIVE, Sector.TECHNOLOGY))
    assert state.sentiment[AssetClass.STOCK] == -100
    state.sentiment[AssetClass.BOND] = 99.5
    apply_sector_rotation(state, card(SentimentLabel.NEGATIVE, Sector.TECHNOLOGY),
                          random.Random(3))
    assert state.sentiment[AssetClass.BOND] == 100


@pytest.mark.parametrize("elapsed,decay", [(1, 1.0), (10, 1.0), (11, 0.6),
                                           (20, 0.6), (21, 0.3), (30, 0.3)])
def test_time_decay_steps(elapsed, decay):
    assert time_decay(elapsed) == decay


def test_impact_weight_direct_and_correlated():
    finance_news = card(SentimentLabel.NEGATIVE, Sector.FINANCE)
    assert impact_weight(Sector.FINANCE, finance_news) == 1.0
    assert impact_weight(Sector.BONDS, finance_news) == pytest.approx(0.2)
    assert impact_weight(Sector.CRYPTO, finance_news) == 0.0

    bonds_news = card(SentimentLabel.NEGATIVE, Sector.BONDS)
    # flight to safety: gold moves against bonds
    assert impact_weight(Sector.GOLD, bonds_news) == pytest.approx(-0.15)


def test_sentiment_term_combines_score_weight_and_decay():
    tech_crash = card(SentimentLabel.VERY_NEGATIVE, Sector.TECHNOLOGY)
    tcs = Asset("tcs", "TCS", AssetClass.STOCK, 100.0)
    bank = Asset("hdfc", "HDFC", AssetClass.STOCK, 100.0)
    assert sentiment_term(tcs, tech_crash, 5) == pytest.approx(-1.0)
    assert sentiment_term(tcs, tech_crash, 15) == pytest.approx(-0.6)
    assert sentiment_term(bank, tech_crash, 25) == pytest.approx(-1.0 * 0.15 * 0.3)
    assert sentiment_term(tcs, None, 5) == 0.0


def test_polarity_streak_is_tracked():
    state = MatchState("m")
    neg = card(SentimentLabel.NEGATIVE, Sector.FINANCE)
    pos = card(SentimentLabel.VERY_POSITIVE, Sector.FINANCE)
    track_polarity(state, neg)
    track_polarity(state, neg)
    assert (state.last_polarity, state.consecutive_same_polarity) == ("negative", 1)
    track_polarity(state, pos)
    assert (state.last_polarity, state.consecutive_same_polarity) == ("positive", 0)


def test_every_news_card_moves_sentiment_within_bounds():
    for news in NEWS_CARDS:
        state = MatchState("m")
        apply_news_sentiment(state, news)
        apply_sector_rotation(state, news, random.Random(0))
        assert all(-100 <= v <= 100 for v in state.sentiment.values())
