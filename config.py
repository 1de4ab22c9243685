# config.py - Market Match tunables
import os

from dotenv import load_dotenv

load_dotenv()

# -------------------- Match --------------------
GAME_ROUNDS = 5
ROUND_TICKS = 35             # one tick per second
NEWS_PHASE_TICKS = 5         # first ticks of a round, no price movement
STARTING_CASH = 10_000.0
PRICE_HISTORY_LEN = 50

# Pre-match sub-phase durations, seconds
INTRO_SECONDS = 3
AVATAR_SELECTION_SECONDS = 15
STRATEGY_SELECTION_SECONDS = 15
SCENARIO_TEASER_SECONDS = 8

# -------------------- Price formula --------------------
# P_new = P_old * (1 + r_base + alpha * S + eps)
MARKET_DRIFT = {
    "STOCK": 0.0015,
    "CRYPTO": 0.0005,
    "BOND": 0.0002,
    "ETF": 0.0012,
}

VOLATILITY_FACTOR = {
    "STOCK": 0.04,
    "CRYPTO": 0.08,  # most sensitive to news
    "BOND": 0.02,
    "ETF": 0.03,
}

# +/- range that ~99.7% of noise draws fall within
RANDOM_NOISE_RANGE = {
    "STOCK": 0.008,
    "CRYPTO": 0.015,
    "BOND": 0.003,
    "ETF": 0.006,
}

# -------------------- Safety rails --------------------
MAX_ROUND_MOVE_PERCENT = 0.25
MIN_PRICE_THRESHOLD = 0.01

# -------------------- Sentiment --------------------
SENTIMENT_DISPLAY_SCALE = 20   # news score -> sentiment points
SENTIMENT_LIMIT = 100
ROTATION_DRIFT_RANGE = (0.01, 0.02)
INDIRECT_IMPACT_FACTOR = 0.5
# (elapsed trading seconds upper bound, decay); last entry applies after
TIME_DECAY_STEPS = ((10, 1.0), (20, 0.6))
TIME_DECAY_FLOOR = 0.3

# -------------------- Execution --------------------
# (notional strictly above, slippage), checked from the top
SLIPPAGE_TIERS = ((5000.0, 0.02), (2000.0, 0.01), (1000.0, 0.005))

# -------------------- Risk / power-ups / results --------------------
RISK_SCALE = 500
SAFETY_FIRST_RISK_REDUCTION = 10
RISK_SHIELD_REDUCTION = 20
BAILOUT_CASH = 1000.0
DIVERSIFIER_MIN_ASSETS = 4
DIVERSIFIER_BONUS = 0.05
RISK_PENALTY_WEIGHT = 0.5

# -------------------- Deployment --------------------
TICK_SECONDS = float(os.getenv("TICK_SECONDS", "1.0"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
MATCH_SEED = int(os.environ["MATCH_SEED"]) if os.getenv("MATCH_SEED") else None

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
ANALYSIS_TIMEOUT_SECONDS = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "8"))
