# domain/execution.py
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import config
from domain.models import (Holding, MatchState, Phase, PlayerState, Side,
                           TransactionLogEntry)
from domain.portfolio import revalue_player

logger = logging.getLogger(__name__)


def calculate_slippage(quantity: float, price: float) -> float:
    """Adverse price fraction for an order of `quantity` at `price`."""
    notional = quantity * price
    for threshold, slippage in config.SLIPPAGE_TIERS:
        if notional > threshold:
            return slippage
    return 0.0


def _validate(state: MatchState, user_id: str, asset_id: str,
              quantity: float) -> Tuple[Optional[str], Optional[PlayerState]]:
    if state.phase != Phase.PLAYING:
        return "wrong_phase", None
    pl = state.player(user_id)
    if pl is None:
        return "unknown_player", None
    if state.asset(asset_id) is None:
        return "unknown_asset", None
    if not math.isfinite(quantity) or quantity <= 0:
        return "invalid_quantity", None
    return None, pl


def _log_entry(state: MatchState, side: Side, asset_id: str, quantity: float,
               price: float, total: float) -> TransactionLogEntry:
    asset = state.asset(asset_id)
    return TransactionLogEntry(
        round=state.current_round,
        side=side,
        asset_id=asset_id,
        asset_class=asset.asset_class,
        quantity=quantity,
        price=price,
        total_value=total,
        event_id=state.active_event.id if state.active_event else None,
        sentiment_at_time=state.sentiment[asset.asset_class],
    )


def execute_buy(state: MatchState, user_id: str, asset_id: str,
                quantity: float) -> Tuple[bool, Optional[str]]:
    """
    Buy `quantity` of `asset_id` for player `user_id` at the current price
    plus slippage.
    - Rejected with no state change on wrong phase, unknown player/asset,
      non-positive quantity or insufficient cash.
    - Extends an existing holding with a weighted average buy price.

    Returns:
        (ok, reason) where reason is None on success.
    """
    reason, pl = _validate(state, user_id, asset_id, quantity)
    if reason:
        return False, reason

    asset = state.asset(asset_id)
    effective = asset.price * (1 + calculate_slippage(quantity, asset.price))
    cost = quantity * effective
    if pl.cash < cost:
        return False, "insufficient_cash"

    entry = _log_entry(state, Side.BUY, asset_id, quantity, effective, cost)
    pos = pl.holding(asset_id)
    pl.cash -= cost
    if pos:
        total_cost = pos.quantity * pos.avg_buy_price + cost
        pos.quantity += quantity
        pos.avg_buy_price = total_cost / pos.quantity
    else:
        pl.holdings.append(Holding(asset_id, quantity, effective))
    pl.transaction_log.append(entry)
    revalue_player(state, pl)
    return True, None


def execute_sell(state: MatchState, user_id: str, asset_id: str,
                 quantity: float) -> Tuple[bool, Optional[str]]:
    """
    Sell `quantity` of `asset_id` at the current price minus slippage.
    The average buy price of what remains is untouched; a holding that
    reaches zero is removed.

    Returns:
        (ok, reason) where reason is None on success.
    """
    reason, pl = _validate(state, user_id, asset_id, quantity)
    if reason:
        return False, reason

    pos = pl.holding(asset_id)
    if pos is None or pos.quantity < quantity:
        return False, "insufficient_holdings"

    asset = state.asset(asset_id)
    effective = asset.price * (1 - calculate_slippage(quantity, asset.price))
    revenue = quantity * effective

    entry = _log_entry(state, Side.SELL, asset_id, quantity, effective, revenue)
    pl.cash += revenue
    pos.quantity -= quantity
    if pos.quantity <= 0:
        pl.holdings = [h for h in pl.holdings if h.asset_id != asset_id]
    pl.transaction_log.append(entry)
    revalue_player(state, pl)
    return True, None
