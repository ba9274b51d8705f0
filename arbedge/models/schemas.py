"""
Sports betting data models and schemas.

Defines the core data structures for:
- Supported sports and their upstream market configuration
- Bookmaker odds quotes and matches
- Arbitrage results (legs + stake split)
- Opportunities (results enriched with match metadata and stake amounts)

Every record is immutable: matches are built fresh per request from
upstream odds data and discarded once the opportunity list is produced.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


DRAW_OUTCOME = "Draw"


class Sport(str, Enum):
    """Supported sports."""
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    TENNIS = "tennis"
    NFL = "nfl"
    MLB = "mlb"

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["Sport"]:
        """Convert string to Sport enum (case-insensitive)."""
        if not isinstance(value, str):
            return None
        value_lower = value.strip().lower()
        for sport in cls:
            if sport.value == value_lower or sport.name.lower() == value_lower:
                return sport
        return None

    @property
    def config(self) -> "SportConfig":
        return SPORT_CONFIGS[self]

    @property
    def display_name(self) -> str:
        """Capitalized name used in summaries ("Soccer", "Nfl")."""
        return self.value.capitalize()


@dataclass(frozen=True)
class SportConfig:
    """Upstream market configuration for one sport."""
    api_key: str          # The Odds API sport key (e.g., "soccer_epl")
    has_draw: bool        # 3-way (1X2) market when True
    display_name: str     # League label attached to every match
    emoji: str = "🎯"


SPORT_CONFIGS: dict[Sport, SportConfig] = {
    Sport.SOCCER: SportConfig(
        api_key="soccer_epl",
        has_draw=True,
        display_name="Soccer - Premier League",
        emoji="⚽",
    ),
    Sport.BASKETBALL: SportConfig(
        api_key="basketball_nba",
        has_draw=False,
        display_name="NBA Basketball",
        emoji="🏀",
    ),
    Sport.TENNIS: SportConfig(
        api_key="tennis_atp_aus_open",
        has_draw=False,
        display_name="Tennis - ATP",
        emoji="🎾",
    ),
    Sport.NFL: SportConfig(
        api_key="americanfootball_nfl",
        has_draw=False,
        display_name="NFL",
        emoji="🏈",
    ),
    Sport.MLB: SportConfig(
        api_key="baseball_mlb",
        has_draw=False,
        display_name="MLB Baseball",
        emoji="⚾",
    ),
}

SUPPORTED_SPORTS: list[str] = [sport.value for sport in Sport]


# =============================================================================
# Odds
# =============================================================================

@dataclass(frozen=True)
class OddsQuote:
    """
    One bookmaker's head-to-head price for one match.

    All quotes of a match share the same pair of outcome names. Odds are
    decimal (payout = stake * odds) and are not validated here: feeding
    odds <= 0 is a caller data-quality problem.
    """
    outcome1_name: str              # Home team / player 1
    outcome2_name: str              # Away team / player 2
    bookmaker: str
    odds1: float
    odds2: float
    draw_odds: Optional[float] = None  # Only present for 3-way markets

    def odds_for(self, slot: "OutcomeSlot") -> Optional[float]:
        """Get this quote's price for an outcome slot."""
        if slot == OutcomeSlot.OUTCOME1:
            return self.odds1
        if slot == OutcomeSlot.OUTCOME2:
            return self.odds2
        return self.draw_odds


class OutcomeSlot(Enum):
    """Outcome positions of a head-to-head market."""
    OUTCOME1 = "outcome1"
    DRAW = "draw"
    OUTCOME2 = "outcome2"


@dataclass(frozen=True)
class Match:
    """A single sporting event with every bookmaker quote collected for it."""
    name: str                       # "Arsenal vs Chelsea"
    league: str
    start_time: Optional[str]       # ISO 8601, opaque to the engine
    has_draw_market: bool
    quotes: tuple[OddsQuote, ...] = ()
    sport: Optional[str] = None

    @property
    def bookmakers(self) -> list[str]:
        """Distinct bookmakers in quote order."""
        seen: list[str] = []
        for quote in self.quotes:
            if quote.bookmaker not in seen:
                seen.append(quote.bookmaker)
        return seen


@dataclass(frozen=True)
class BestPrice:
    """Highest decimal odds found for one outcome slot and who offered it."""
    odds: float
    bookmaker: str

    @property
    def implied_prob(self) -> float:
        return 1 / self.odds


# =============================================================================
# Arbitrage
# =============================================================================

@dataclass(frozen=True)
class ArbitrageLeg:
    """One bet of a hedged combination."""
    outcome: str
    bookmaker: str
    odds: float
    stake_pct: float  # Share of total stake, 2 dp


@dataclass(frozen=True)
class ArbitrageResult:
    """
    A detected arbitrage for one match.

    Only constructed when the combined implied probability of the best
    prices is strictly below 1.0, so ``exists`` is always True for
    instances handed out by the engine.
    """
    profit_percentage: float                 # Guaranteed return on stake, 2 dp
    legs: tuple[ArbitrageLeg, ...]           # outcome1, [draw], outcome2
    total_implied_probability: float
    exists: bool = True


@dataclass(frozen=True)
class StakedLeg:
    """An arbitrage leg with money amounts for a concrete total stake."""
    outcome: str
    bookmaker: str
    odds: float
    stake_pct: float
    stake_amount: float
    potential_return: float

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome,
            "bookmaker": self.bookmaker,
            "odds": self.odds,
            "stake_pct": self.stake_pct,
            "stake_amount": self.stake_amount,
            "potential_return": self.potential_return,
        }


@dataclass(frozen=True)
class MatchInfo:
    """Match metadata carried by an opportunity."""
    name: str
    league: str
    start_time: Optional[str] = None
    sport: Optional[str] = None


@dataclass(frozen=True)
class Opportunity:
    """
    An externally visible arbitrage opportunity.

    Ready for rendering: no further numeric transformation is needed.
    """
    id: str
    match: MatchInfo
    profit_percentage: float
    total_stake: float
    guaranteed_profit: float
    bets: tuple[StakedLeg, ...]
    detected_at: datetime = field(compare=False)

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dict."""
        return {
            "id": self.id,
            "match": {
                "name": self.match.name,
                "sport": self.match.sport,
                "league": self.match.league,
                "start_time": self.match.start_time,
            },
            "profit_percentage": self.profit_percentage,
            "total_stake": self.total_stake,
            "guaranteed_profit": self.guaranteed_profit,
            "bets": [bet.to_dict() for bet in self.bets],
            "detected_at": self.detected_at.isoformat(),
        }
