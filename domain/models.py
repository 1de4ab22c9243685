from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

import config
from domain.catalog import (ASSETS, AssetClass, AvatarId, NewsCard, Scenario,
                            StrategyId)

RISK_SHIELD = "risk-shield"
BAILOUT = "bailout"


class Phase(str, Enum):
  PRE_MATCH = "PRE_MATCH"
  PLAYING = "PLAYING"
  FINISHED = "FINISHED"


class SubPhase(str, Enum):
  INTRO = "INTRO"
  AVATAR_SELECTION = "AVATAR_SELECTION"
  STRATEGY_SELECTION = "STRATEGY_SELECTION"
  SCENARIO_TEASER = "SCENARIO_TEASER"


class Side(str, Enum):
  BUY = "BUY"
  SELL = "SELL"


@dataclass(frozen=True)
class TransactionLogEntry:
  round: int
  side: Side
  asset_id: str
  asset_class: AssetClass
  quantity: float
  price: float
  total_value: float
  event_id: Optional[str]
  sentiment_at_time: float


class PowerUp:

  def __init__(self, power_up_id: str, name: str, description: str,
               uses_left: int = 1):
    self.id = power_up_id
    self.name = name
    self.description = description
    self.uses_left = uses_left


def starting_power_ups() -> List[PowerUp]:
  return [
      PowerUp(RISK_SHIELD, "Risk Shield", "-20 Risk Score"),
      PowerUp(BAILOUT, "Bailout", f"+${config.BAILOUT_CASH:,.0f} Cash"),
  ]


class Holding:

  def __init__(self, asset_id: str, quantity: float, avg_buy_price: float):
    self.asset_id = asset_id
    self.quantity = quantity
    self.avg_buy_price = avg_buy_price


class Asset:

  def __init__(self, asset_id: str, name: str, asset_class: AssetClass,
               price: float):
    self.id = asset_id
    self.name = name
    self.asset_class = asset_class
    self.price = float(price)
    # oldest first; deque drops from the left on overflow
    self.history: Deque[float] = deque([self.price],
                                       maxlen=config.PRICE_HISTORY_LEN)

  def record(self, price: float):
    self.price = price
    self.history.append(price)


class PlayerState:

  def __init__(self, user_id: str, name: str, starting_cash: float):
    self.user_id = user_id
    self.name = name
    self.ready = False
    self.cash = float(starting_cash)
    self.holdings: List[Holding] = []
    self.risk_score = 0
    self.power_ups = starting_power_ups()
    self.total_value = float(starting_cash)
    self.avatar_id = AvatarId.UNSELECTED
    self.strategy_id = StrategyId.UNSELECTED
    self.transaction_log: List[TransactionLogEntry] = []

  def holding(self, asset_id: str) -> Optional[Holding]:
    for h in self.holdings:
      if h.asset_id == asset_id:
        return h
    return None

  def power_up(self, power_up_id: str) -> Optional[PowerUp]:
    for p in self.power_ups:
      if p.id == power_up_id:
        return p
    return None


class MatchState:

  def __init__(self, match_id: str, starting_cash: float = config.STARTING_CASH):
    self.match_id = match_id
    self.starting_cash = float(starting_cash)
    self.phase = Phase.PRE_MATCH
    self.sub_phase = SubPhase.INTRO
    self.countdown_active = False
    self.current_round = 0
    self.max_rounds = config.GAME_ROUNDS
    self.time_remaining = 0
    self.frame = 0  # ticks elapsed in the current round
    self.active_event: Optional[NewsCard] = None
    self.active_scenario: Optional[Scenario] = None
    self.fear_zone_active = False
    self.sentiment: Dict[AssetClass, float] = {c: 0.0 for c in AssetClass}
    # players / market
    self.players: List[PlayerState] = []
    self.assets: List[Asset] = [
        Asset(spec.id, spec.name, spec.asset_class, spec.start_price)
        for spec in ASSETS
    ]
    self.round_start_prices: Dict[str, float] = {}
    self.news_history: List[Tuple[int, NewsCard]] = []
    # diagnostic only, never read by the price model
    self.last_polarity = "neutral"
    self.consecutive_same_polarity = 0

  def player(self, user_id: str) -> Optional[PlayerState]:
    for p in self.players:
      if p.user_id == user_id:
        return p
    return None

  def player_by_name(self, name: str) -> Optional[PlayerState]:
    for p in self.players:
      if p.name == name:
        return p
    return None

  def asset(self, asset_id: str) -> Optional[Asset]:
    for a in self.assets:
      if a.id == asset_id:
        return a
    return None
