import math
import random

import config
from domain.catalog import AssetClass
from domain.models import Asset, MatchState
from domain.sentiment import sentiment_term


def gaussian_noise(rng: random.Random, asset_class: AssetClass) -> float:
  # Box-Muller; range / 3 keeps ~99.7% of draws inside +/- range
  noise_range = config.RANDOM_NOISE_RANGE[asset_class.value]
  u1 = max(1e-9, rng.random())
  u2 = rng.random()
  z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2 * math.pi * u2)
  return z * (noise_range / 3)


def apply_safety_rails(price: float, base_price: float) -> float:
  lo = base_price * (1 - config.MAX_ROUND_MOVE_PERCENT)
  hi = base_price * (1 + config.MAX_ROUND_MOVE_PERCENT)
  price = max(lo, min(hi, price))
  return max(config.MIN_PRICE_THRESHOLD, price)


def next_price(price: float, base_price: float, asset_class: AssetClass,
               sentiment: float, noise: float) -> float:
  r_base = config.MARKET_DRIFT[asset_class.value]
  alpha = config.VOLATILITY_FACTOR[asset_class.value]
  raw = price * (1 + r_base + alpha * sentiment + noise)
  return apply_safety_rails(raw, base_price)


def mark_round_start(state: MatchState):
  state.round_start_prices = {a.id: a.price for a in state.assets}


def step_asset(state: MatchState, asset: Asset, rng: random.Random,
               trading_seconds_elapsed: int) -> float:
  base = state.round_start_prices.get(asset.id, asset.price)
  s = sentiment_term(asset, state.active_event, trading_seconds_elapsed)
  newp = next_price(asset.price, base, asset.asset_class, s,
                    gaussian_noise(rng, asset.asset_class))
  asset.record(newp)
  return newp


def step_prices(state: MatchState, rng: random.Random,
                trading_seconds_elapsed: int):
  for asset in state.assets:
    step_asset(state, asset, rng, trading_seconds_elapsed)
