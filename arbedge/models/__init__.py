"""Sports data models and schemas."""

from arbedge.models.schemas import (
    DRAW_OUTCOME,
    SPORT_CONFIGS,
    SUPPORTED_SPORTS,
    ArbitrageLeg,
    ArbitrageResult,
    BestPrice,
    Match,
    MatchInfo,
    OddsQuote,
    Opportunity,
    OutcomeSlot,
    Sport,
    SportConfig,
    StakedLeg,
)

__all__ = [
    "DRAW_OUTCOME",
    "SPORT_CONFIGS",
    "SUPPORTED_SPORTS",
    "ArbitrageLeg",
    "ArbitrageResult",
    "BestPrice",
    "Match",
    "MatchInfo",
    "OddsQuote",
    "Opportunity",
    "OutcomeSlot",
    "Sport",
    "SportConfig",
    "StakedLeg",
]
