# domain/sentiment.py
"""
News -> sentiment propagation.

Two one-shot effects fire when a round's news card is drawn (a direct update
of the affected sectors' asset classes and, for negative news, a rotation
drift into every other sector). During trading the price model consumes a
per-asset term recomputed each tick from the active card, the asset's
sector and the elapsed trading time.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, List

import config
from domain.catalog import (NEWS_CARDS, SECTOR_ASSET_CLASSES,
                            SECTOR_CORRELATION, SECTOR_IMPACT_WEIGHT,
                            SENTIMENT_SCORE, AssetClass, NewsCard, Sector,
                            sector_for)
from domain.models import Asset, MatchState

logger = logging.getLogger(__name__)


def clamp_sentiment(value: float) -> float:
    return max(-config.SENTIMENT_LIMIT, min(config.SENTIMENT_LIMIT, value))


def draw_news(rng: random.Random,
              cards: Iterable[NewsCard] = NEWS_CARDS) -> NewsCard:
    return rng.choice(list(cards))


def apply_news_sentiment(state: MatchState, news: NewsCard):
    """Shift each affected sector's asset classes by score * weight * 20."""
    score = SENTIMENT_SCORE[news.sentiment]
    for sector in news.affected_sectors:
        change = score * SECTOR_IMPACT_WEIGHT[sector] * config.SENTIMENT_DISPLAY_SCALE
        for asset_class in SECTOR_ASSET_CLASSES[sector]:
            state.sentiment[asset_class] = clamp_sentiment(
                state.sentiment[asset_class] + change)


def apply_sector_rotation(state: MatchState, news: NewsCard,
                          rng: random.Random) -> List[Sector]:
    """On negative news, unaffected sectors drift up by 1-2%.

    Returns the sectors that received drift (empty for non-negative news).
    """
    if news.sentiment.polarity != "negative":
        return []
    lo, hi = config.ROTATION_DRIFT_RANGE
    unaffected = [s for s in Sector if s not in news.affected_sectors]
    for sector in unaffected:
        for asset_class in SECTOR_ASSET_CLASSES[sector]:
            drift = rng.uniform(lo, hi) * 100
            state.sentiment[asset_class] = clamp_sentiment(
                state.sentiment[asset_class] + drift)
    logger.info("sector rotation into %s", ", ".join(s.value for s in unaffected))
    return unaffected


def track_polarity(state: MatchState, news: NewsCard):
    polarity = news.sentiment.polarity
    if polarity == state.last_polarity:
        state.consecutive_same_polarity += 1
    else:
        state.consecutive_same_polarity = 0
    state.last_polarity = polarity


def time_decay(trading_seconds_elapsed: int) -> float:
    for upper, decay in config.TIME_DECAY_STEPS:
        if trading_seconds_elapsed <= upper:
            return decay
    return config.TIME_DECAY_FLOOR


def impact_weight(sector: Sector, news: NewsCard) -> float:
    if sector in news.affected_sectors:
        return SECTOR_IMPACT_WEIGHT[sector]
    weight = 0.0
    for affected in news.affected_sectors:
        correlation = SECTOR_CORRELATION[affected].get(sector, 0.0)
        weight += correlation * config.INDIRECT_IMPACT_FACTOR
    return weight


def sentiment_term(asset: Asset, news: NewsCard | None,
                   trading_seconds_elapsed: int) -> float:
    """S for one asset: base score * impact weight * time decay."""
    if news is None:
        return 0.0
    sector = sector_for(asset.id, asset.asset_class)
    return (SENTIMENT_SCORE[news.sentiment] * impact_weight(sector, news) *
            time_decay(trading_seconds_elapsed))


def class_sentiment(state: MatchState, asset_class: AssetClass) -> float:
    return state.sentiment[asset_class]
