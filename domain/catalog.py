# domain/catalog.py
"""
Static reference data for a match: assets, avatars, strategies, scenarios,
news cards and the sector maps used to route news impact.

Everything here is immutable for the process lifetime. The mapping tables
are checked for totality at import by `validate_catalog()`, so a missing
entry fails loudly at startup instead of silently defaulting at use time.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class CatalogError(ValueError):
    """Reference data is inconsistent or incomplete."""


class AssetClass(str, Enum):
    STOCK = "STOCK"
    CRYPTO = "CRYPTO"
    BOND = "BOND"
    ETF = "ETF"


class Sector(str, Enum):
    TECHNOLOGY = "technology"
    FINANCE = "finance"
    ENERGY = "energy"
    CRYPTO = "crypto"
    BONDS = "bonds"
    GOLD = "gold"


class SentimentLabel(str, Enum):
    VERY_NEGATIVE = "very_negative"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    VERY_POSITIVE = "very_positive"

    @property
    def polarity(self) -> str:
        if "positive" in self.value:
            return "positive"
        if "negative" in self.value:
            return "negative"
        return "neutral"


class AvatarId(str, Enum):
    UNSELECTED = "UNSELECTED"
    BULL = "BULL"
    BEAR = "BEAR"
    WHALE = "WHALE"
    FOX = "FOX"


class StrategyId(str, Enum):
    UNSELECTED = "UNSELECTED"
    SAFETY_FIRST = "SAFETY_FIRST"
    DIVERSIFIER = "DIVERSIFIER"
    MOMENTUM_RIDER = "MOMENTUM_RIDER"
    NEWS_HUNTER = "NEWS_HUNTER"


@dataclass(frozen=True)
class AssetSpec:
    id: str
    name: str
    asset_class: AssetClass
    start_price: float


@dataclass(frozen=True)
class Avatar:
    id: AvatarId
    name: str
    description: str


@dataclass(frozen=True)
class Strategy:
    id: StrategyId
    name: str
    description: str


@dataclass(frozen=True)
class Scenario:
    id: str
    title: str
    description: str
    effect_description: str


@dataclass(frozen=True)
class NewsCard:
    id: str
    title: str
    description: str
    sentiment: SentimentLabel
    affected_sectors: Tuple[Sector, ...]


# -------------------- Assets --------------------
ASSETS: Tuple[AssetSpec, ...] = (
    AssetSpec("tcs", "Tata Consultancy", AssetClass.STOCK, 3850.0),
    AssetSpec("infy", "Infosys", AssetClass.STOCK, 1520.0),
    AssetSpec("hdfc", "HDFC Bank", AssetClass.STOCK, 1640.0),
    AssetSpec("icici", "ICICI Bank", AssetClass.STOCK, 1080.0),
    AssetSpec("sbi", "State Bank of India", AssetClass.STOCK, 780.0),
    AssetSpec("reliance", "Reliance Industries", AssetClass.STOCK, 2900.0),
    AssetSpec("sol", "Solana", AssetClass.CRYPTO, 145.0),
    AssetSpec("ltc", "Litecoin", AssetClass.CRYPTO, 82.0),
    AssetSpec("icp", "Internet Computer", AssetClass.CRYPTO, 11.5),
    AssetSpec("etc", "Ethereum Classic", AssetClass.CRYPTO, 26.0),
    AssetSpec("qnt", "Quant", AssetClass.CRYPTO, 98.0),
    AssetSpec("egld", "MultiversX", AssetClass.CRYPTO, 38.0),
    AssetSpec("doge", "Dogecoin", AssetClass.CRYPTO, 0.16),
    AssetSpec("xvs", "Venus", AssetClass.CRYPTO, 9.4),
    AssetSpec("ethfi", "Ether.fi", AssetClass.CRYPTO, 3.1),
    AssetSpec("us-treasury", "US Treasury 10Y", AssetClass.BOND, 98.5),
    AssetSpec("corp-bond-aaa", "AAA Corporate Bond", AssetClass.BOND, 101.2),
    AssetSpec("muni-bond", "Municipal Bond", AssetClass.BOND, 99.8),
    AssetSpec("junk-bond", "High Yield Bond", AssetClass.BOND, 87.0),
    AssetSpec("tips-bond", "Inflation Protected Bond", AssetClass.BOND, 100.4),
    AssetSpec("green-bond", "Green Energy Bond", AssetClass.BOND, 102.0),
    AssetSpec("sov-gold-bond", "Sovereign Gold Bond", AssetClass.BOND, 61.0),
    AssetSpec("it-bees", "IT BeES", AssetClass.ETF, 39.0),
    AssetSpec("bank-bees", "Bank BeES", AssetClass.ETF, 510.0),
    AssetSpec("infra-bees", "Infra BeES", AssetClass.ETF, 870.0),
    AssetSpec("gold-bees", "Gold BeES", AssetClass.ETF, 58.0),
    AssetSpec("nifty-bees", "Nifty BeES", AssetClass.ETF, 265.0),
)

# Explicit asset -> sector routing. Assets missing here fall back to
# CLASS_DEFAULT_SECTOR (nifty-bees relies on that).
ASSET_SECTOR: Dict[str, Sector] = {
    "tcs": Sector.TECHNOLOGY,
    "infy": Sector.TECHNOLOGY,
    "it-bees": Sector.TECHNOLOGY,
    "hdfc": Sector.FINANCE,
    "icici": Sector.FINANCE,
    "sbi": Sector.FINANCE,
    "bank-bees": Sector.FINANCE,
    "us-treasury": Sector.FINANCE,
    "corp-bond-aaa": Sector.FINANCE,
    "muni-bond": Sector.FINANCE,
    "junk-bond": Sector.FINANCE,
    "tips-bond": Sector.FINANCE,
    "reliance": Sector.ENERGY,
    "infra-bees": Sector.ENERGY,
    "green-bond": Sector.ENERGY,
    "sol": Sector.CRYPTO,
    "ltc": Sector.CRYPTO,
    "icp": Sector.CRYPTO,
    "etc": Sector.CRYPTO,
    "qnt": Sector.CRYPTO,
    "egld": Sector.CRYPTO,
    "doge": Sector.CRYPTO,
    "xvs": Sector.CRYPTO,
    "ethfi": Sector.CRYPTO,
    "gold-bees": Sector.GOLD,
    "sov-gold-bond": Sector.GOLD,
}

# Documented default for unmapped assets: bonds and crypto keep their
# natural sector, everything else is treated as finance.
DEFAULT_SECTOR = Sector.FINANCE
CLASS_DEFAULT_SECTOR: Dict[AssetClass, Sector] = {
    AssetClass.STOCK: DEFAULT_SECTOR,
    AssetClass.ETF: DEFAULT_SECTOR,
    AssetClass.BOND: Sector.BONDS,
    AssetClass.CRYPTO: Sector.CRYPTO,
}

SECTOR_ASSET_CLASSES: Dict[Sector, Tuple[AssetClass, ...]] = {
    Sector.TECHNOLOGY: (AssetClass.STOCK,),
    Sector.FINANCE: (AssetClass.STOCK, AssetClass.ETF, AssetClass.BOND),
    Sector.ENERGY: (AssetClass.STOCK, AssetClass.ETF),
    Sector.CRYPTO: (AssetClass.CRYPTO,),
    Sector.BONDS: (AssetClass.BOND,),
    Sector.GOLD: (AssetClass.ETF,),
}

SECTOR_IMPACT_WEIGHT: Dict[Sector, float] = {s: 1.0 for s in Sector}

# Asymmetric; negative entries model flight-to-safety moves.
SECTOR_CORRELATION: Dict[Sector, Dict[Sector, float]] = {
    Sector.TECHNOLOGY: {Sector.FINANCE: 0.3, Sector.CRYPTO: 0.2},
    Sector.FINANCE: {Sector.TECHNOLOGY: 0.3, Sector.BONDS: 0.4, Sector.ENERGY: 0.2},
    Sector.ENERGY: {Sector.FINANCE: 0.2},
    Sector.CRYPTO: {Sector.TECHNOLOGY: 0.2},
    Sector.BONDS: {Sector.FINANCE: 0.4, Sector.GOLD: -0.3},
    Sector.GOLD: {Sector.BONDS: -0.3, Sector.FINANCE: -0.2},
}

SENTIMENT_SCORE: Dict[SentimentLabel, float] = {
    SentimentLabel.VERY_POSITIVE: 1.0,
    SentimentLabel.POSITIVE: 0.5,
    SentimentLabel.NEUTRAL: 0.0,
    SentimentLabel.NEGATIVE: -0.5,
    SentimentLabel.VERY_NEGATIVE: -1.0,
}

# -------------------- Characters & strategies --------------------
AVATARS: Tuple[Avatar, ...] = (
    Avatar(AvatarId.BULL, "The Bull", "Optimist who buys every dip."),
    Avatar(AvatarId.BEAR, "The Bear", "Sceptic who expects the worst."),
    Avatar(AvatarId.WHALE, "The Whale", "Big orders, big ripples."),
    Avatar(AvatarId.FOX, "The Fox", "Quick, patient, opportunistic."),
)

STRATEGIES: Tuple[Strategy, ...] = (
    Strategy(StrategyId.SAFETY_FIRST, "Safety First",
             "Risk score is reduced by 10 points."),
    Strategy(StrategyId.DIVERSIFIER, "Diversifier",
             "+5% final value when holding 4 or more assets."),
    Strategy(StrategyId.MOMENTUM_RIDER, "Momentum Rider",
             "Ride the trend, no special rules."),
    Strategy(StrategyId.NEWS_HUNTER, "News Hunter",
             "Trade the headlines, no special rules."),
)

SCENARIOS: Tuple[Scenario, ...] = (
    Scenario("rate-shock", "Rate Shock",
             "Central banks are signalling aggressive hikes.",
             "Bonds will wobble and banks will feel it first."),
    Scenario("tech-boom", "Tech Boom",
             "Everyone is talking about AI.",
             "Hype moves fast. So do corrections."),
    Scenario("crypto-winter", "Crypto Winter",
             "Liquidity is drying up in digital assets.",
             "Crypto swings the hardest on every headline."),
    Scenario("energy-crunch", "Energy Crunch",
             "Supply lines are stretched thin.",
             "Energy names and infrastructure lead the tape."),
)

NEWS_CARDS: Tuple[NewsCard, ...] = (
    NewsCard("tech-earnings-beat", "Tech Giants Crush Earnings",
             "IT majors report record deal wins.",
             SentimentLabel.VERY_POSITIVE, (Sector.TECHNOLOGY,)),
    NewsCard("tech-layoffs", "Mass Layoffs Hit IT Sector",
             "Clients cut budgets, hiring freezes spread.",
             SentimentLabel.VERY_NEGATIVE, (Sector.TECHNOLOGY,)),
    NewsCard("rate-cut", "Surprise Rate Cut",
             "The central bank cuts rates by 50bps.",
             SentimentLabel.POSITIVE, (Sector.FINANCE, Sector.BONDS)),
    NewsCard("bank-fraud", "Banking Fraud Uncovered",
             "Regulators probe a large lender.",
             SentimentLabel.NEGATIVE, (Sector.FINANCE,)),
    NewsCard("oil-spike", "Oil Prices Spike",
             "Supply disruption sends crude higher.",
             SentimentLabel.POSITIVE, (Sector.ENERGY,)),
    NewsCard("green-subsidy-cut", "Green Subsidies Slashed",
             "Government trims renewable incentives.",
             SentimentLabel.NEGATIVE, (Sector.ENERGY,)),
    NewsCard("crypto-etf", "Crypto ETF Approved",
             "Institutional money gets a new on-ramp.",
             SentimentLabel.VERY_POSITIVE, (Sector.CRYPTO,)),
    NewsCard("exchange-hack", "Major Exchange Hacked",
             "Withdrawals halted after a security breach.",
             SentimentLabel.VERY_NEGATIVE, (Sector.CRYPTO,)),
    NewsCard("gold-rush", "Investors Flock to Gold",
             "Geopolitical tension lifts safe havens.",
             SentimentLabel.POSITIVE, (Sector.GOLD,)),
    NewsCard("bond-selloff", "Bond Market Selloff",
             "Yields jump on inflation fears.",
             SentimentLabel.NEGATIVE, (Sector.BONDS,)),
    NewsCard("market-calm", "Quiet Session Expected",
             "No major data releases today.",
             SentimentLabel.NEUTRAL, (Sector.FINANCE,)),
    NewsCard("global-recession", "Recession Fears Grip Markets",
             "Leading indicators point to a slowdown.",
             SentimentLabel.VERY_NEGATIVE,
             (Sector.TECHNOLOGY, Sector.FINANCE, Sector.ENERGY)),
)

ASSETS_BY_ID: Dict[str, AssetSpec] = {a.id: a for a in ASSETS}
AVATARS_BY_ID: Dict[AvatarId, Avatar] = {a.id: a for a in AVATARS}
STRATEGIES_BY_ID: Dict[StrategyId, Strategy] = {s.id: s for s in STRATEGIES}


def sector_for(asset_id: str, asset_class: AssetClass) -> Sector:
    """Sector an asset's news impact is routed through."""
    sector = ASSET_SECTOR.get(asset_id)
    if sector is None:
        sector = CLASS_DEFAULT_SECTOR[asset_class]
    return sector


def validate_catalog() -> None:
    """Check that every lookup table is total over its enum and ids resolve."""
    for table, name in ((SECTOR_ASSET_CLASSES, "SECTOR_ASSET_CLASSES"),
                        (SECTOR_IMPACT_WEIGHT, "SECTOR_IMPACT_WEIGHT"),
                        (SECTOR_CORRELATION, "SECTOR_CORRELATION")):
        missing = [s.value for s in Sector if s not in table]
        if missing:
            raise CatalogError(f"{name} has no entry for {missing}")

    missing = [c.value for c in AssetClass if c not in CLASS_DEFAULT_SECTOR]
    if missing:
        raise CatalogError(f"CLASS_DEFAULT_SECTOR has no entry for {missing}")

    missing = [s.value for s in SentimentLabel if s not in SENTIMENT_SCORE]
    if missing:
        raise CatalogError(f"SENTIMENT_SCORE has no entry for {missing}")

    if len(ASSETS_BY_ID) != len(ASSETS):
        raise CatalogError("duplicate asset id in ASSETS")
    unknown = set(ASSET_SECTOR) - set(ASSETS_BY_ID)
    if unknown:
        raise CatalogError(f"ASSET_SECTOR references unknown assets {sorted(unknown)}")
    for spec in ASSETS:
        if spec.start_price <= 0:
            raise CatalogError(f"asset {spec.id} has non-positive start price")

    for card in NEWS_CARDS:
        if not card.affected_sectors:
            raise CatalogError(f"news card {card.id} affects no sector")

    if not (ASSETS and NEWS_CARDS and SCENARIOS and AVATARS and STRATEGIES):
        raise CatalogError("reference data catalog is empty")


def catalog_payload() -> dict:
    return {
        "assets": [{
            "id": a.id,
            "name": a.name,
            "type": a.asset_class.value,
            "startPrice": a.start_price,
            "sector": sector_for(a.id, a.asset_class).value,
        } for a in ASSETS],
        "avatars": [{
            "id": a.id.value,
            "name": a.name,
            "description": a.description
        } for a in AVATARS],
        "strategies": [{
            "id": s.id.value,
            "name": s.name,
            "description": s.description
        } for s in STRATEGIES],
    }


validate_catalog()
