"""
Narrative generator interface and the structured shapes it exchanges.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from domain.catalog import NewsCard, StrategyId
from domain.models import TransactionLogEntry


class PlayerSummary(BaseModel):
    whatYouDidWell: List[str] = Field(min_length=1)
    mistakesAndOpportunities: List[str] = Field(min_length=1)
    improvementSuggestions: List[str] = Field(min_length=1)


class LearningCard(BaseModel):
    title: str
    text: str
    deepDive: str
    searchQuery: str


class Analysis(BaseModel):
    playerSummary: PlayerSummary
    learningCards: List[LearningCard] = Field(min_length=1)


@dataclass(frozen=True)
class PlayerContext:
    """Everything a generator may know about one player's match."""

    player_name: str
    starting_cash: float
    final_value: float
    roi: float
    risk_score: int
    total_rounds: int
    strategy: StrategyId
    news_history: Tuple[Tuple[int, NewsCard], ...] = ()
    trades: Tuple[TransactionLogEntry, ...] = field(default_factory=tuple)

    def news_for_round(self, round_no: int) -> Optional[NewsCard]:
        for r, card in self.news_history:
            if r == round_no:
                return card
        return None


class NarrativeGenerator(ABC):
    """Turns a finished player's context into an `Analysis`."""

    @abstractmethod
    async def analyze(self, context: PlayerContext) -> Analysis:
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        ...
