import math
from typing import Dict, List

import config
from domain.catalog import StrategyId
from domain.models import (BAILOUT, RISK_SHIELD, MatchState, PlayerState,
                           TransactionLogEntry)


def holdings_value(state: MatchState, pl: PlayerState) -> float:
  mv = 0.0
  for h in pl.holdings:
    asset = state.asset(h.asset_id)
    if asset:
      mv += h.quantity * asset.price
  return mv


def risk_score(state: MatchState, pl: PlayerState) -> int:
  """Volatility-weighted exposure normalised to 0..100."""
  total_risk = 0.0
  portfolio = 0.0
  for h in pl.holdings:
    asset = state.asset(h.asset_id)
    if not asset:
      continue
    value = h.quantity * asset.price
    portfolio += value
    vol = config.VOLATILITY_FACTOR[asset.asset_class.value]
    total_risk += value * vol * config.RISK_SCALE
  if portfolio <= 0:
    return 0
  score = min(100, int(math.floor(total_risk / portfolio * 100 + 0.5)))
  if pl.strategy_id == StrategyId.SAFETY_FIRST:
    score = max(0, score - config.SAFETY_FIRST_RISK_REDUCTION)
  return score


def revalue_player(state: MatchState, pl: PlayerState):
  pl.total_value = pl.cash + holdings_value(state, pl)
  pl.risk_score = risk_score(state, pl)


def update_valuations(state: MatchState):
  for pl in state.players:
    revalue_player(state, pl)


def use_power_up(pl: PlayerState, power_up_id: str) -> bool:
  power_up = pl.power_up(power_up_id)
  if power_up is None or power_up.uses_left <= 0:
    return False
  power_up.uses_left -= 1
  if power_up_id == RISK_SHIELD:
    pl.risk_score = max(0, pl.risk_score - config.RISK_SHIELD_REDUCTION)
  elif power_up_id == BAILOUT:
    pl.cash += config.BAILOUT_CASH
    pl.total_value += config.BAILOUT_CASH
  return True


# ---------- Snapshots ----------
def transaction_payload(t: TransactionLogEntry) -> dict:
  return {
      "round": t.round,
      "type": t.side.value,
      "assetId": t.asset_id,
      "assetType": t.asset_class.value,
      "amount": t.quantity,
      "price": round(t.price, 4),
      "totalValue": round(t.total_value, 2),
      "eventActive": t.event_id,
      "sentimentAtTime": round(t.sentiment_at_time, 2),
  }


def snapshot_portfolio(state: MatchState, pl: PlayerState) -> dict:
  rows = []
  for h in pl.holdings:
    asset = state.asset(h.asset_id)
    price = asset.price if asset else 0.0
    rows.append({
        "assetId": h.asset_id,
        "quantity": h.quantity,
        "avgBuyPrice": round(h.avg_buy_price, 4),
        "price": round(price, 4),
        "mktValue": round(h.quantity * price, 2),
        "uPnL": round((price - h.avg_buy_price) * h.quantity, 2)
    })
  return {
      "id": pl.user_id,
      "name": pl.name,
      "cash": round(pl.cash, 2),
      "holdings": rows,
      "riskScore": pl.risk_score,
      "powerUps": [{
          "id": p.id,
          "name": p.name,
          "description": p.description,
          "usesLeft": p.uses_left
      } for p in pl.power_ups],
      "totalValue": round(pl.total_value, 2),
      "avatarId": pl.avatar_id.value,
      "strategyId": pl.strategy_id.value,
      "ready": pl.ready,
      "transactionLog": [transaction_payload(t) for t in pl.transaction_log]
  }


def leaderboard(state: MatchState) -> List[Dict]:
  rows = [{
      "userId": pl.user_id,
      "name": pl.name,
      "totalValue": round(pl.total_value, 2),
      "riskScore": pl.risk_score,
  } for pl in state.players]
  rows.sort(key=lambda r: r["totalValue"], reverse=True)
  return rows


def state_payload(state: MatchState) -> dict:
  ev = state.active_event
  sc = state.active_scenario
  return {
      "type": "GAME_STATE",
      "id": state.match_id,
      "phase": state.phase.value,
      "subPhase": state.sub_phase.value,
      "currentRound": state.current_round,
      "maxRounds": state.max_rounds,
      "timeRemaining": state.time_remaining,
      "activeEvent": {
          "id": ev.id,
          "title": ev.title,
          "description": ev.description,
          "sentiment": ev.sentiment.value,
          "affectedSectors": [s.value for s in ev.affected_sectors],
      } if ev else None,
      "activeScenario": {
          "id": sc.id,
          "title": sc.title,
          "description": sc.description,
          "effectDescription": sc.effect_description,
      } if sc else None,
      "fearZoneActive": state.fear_zone_active,
      "sentiment": {c.value: round(v, 2) for c, v in state.sentiment.items()},
      "players": [snapshot_portfolio(state, pl) for pl in state.players],
      "assets": [{
          "id": a.id,
          "name": a.name,
          "type": a.asset_class.value,
          "currentPrice": round(a.price, 4),
          "history": [round(p, 4) for p in a.history],
      } for a in state.assets],
      "leaderboard": leaderboard(state),
  }
