"""
Opportunity service.

Glues the odds feed, the TTL cache and the arbitrage engine together:
1. Validate the sport
2. Serve the cached default view (min profit 0, stake 100) when fresh
3. Otherwise fetch matches, run the engine and cache the result
4. Filter by the caller's min profit and re-stake for the caller's stake
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol

import structlog

from arbedge.engine.arbitrage import find_arbitrage_opportunities, restake_opportunity
from arbedge.exceptions import OddsFeedError, OddsFeedNotConfiguredError, UnknownSportError
from arbedge.models.schemas import Match, Opportunity, Sport
from arbedge.utils.cache import TTLCache

logger = structlog.get_logger()

# The cached view is always computed with these parameters
CACHE_MIN_PROFIT = 0.0
CACHE_STAKE = 100.0

NOT_CONFIGURED_ERROR = "API not configured"


class MatchSource(Protocol):
    """Anything that can supply matches for a sport (live feed, mock, ...)."""

    async def fetch_matches(self, sport: Sport) -> list[Match]:
        ...


@dataclass(frozen=True)
class CachedOpportunities:
    """What the cache stores per sport."""
    opportunities: tuple[Opportunity, ...]
    matches_analyzed: int


@dataclass
class OpportunityResult:
    """Answer to one opportunities request."""
    sport: Sport
    opportunities: list[Opportunity] = field(default_factory=list)
    from_cache: bool = False
    cache_age_minutes: Optional[int] = None
    matches_analyzed: int = 0
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def avg_profit(self) -> Optional[float]:
        if not self.opportunities:
            return None
        return sum(o.profit_percentage for o in self.opportunities) / len(self.opportunities)


class OpportunityService:
    """
    Serves arbitrage opportunities per sport.

    Usage:
        service = OpportunityService(feed, TTLCache(ttl_seconds=1800))
        result = await service.get_opportunities("soccer", min_profit=1.0, stake=250)
    """

    def __init__(self, source: MatchSource, cache: TTLCache):
        self.source = source
        self.cache = cache
        self.logger = logger.bind(component="opportunity_service")

    async def _compute(self, sport: Sport) -> CachedOpportunities:
        matches = await self.source.fetch_matches(sport)
        opportunities = find_arbitrage_opportunities(
            matches,
            min_profit=CACHE_MIN_PROFIT,
            total_stake=CACHE_STAKE,
        )
        self.logger.info(
            "Computed opportunities",
            sport=sport.value,
            matches=len(matches),
            opportunities=len(opportunities),
        )
        return CachedOpportunities(
            opportunities=tuple(opportunities),
            matches_analyzed=len(matches),
        )

    @staticmethod
    def _view(
        opportunities: tuple[Opportunity, ...],
        min_profit: float,
        stake: float,
    ) -> list[Opportunity]:
        """Filter and re-stake the cached default view."""
        view = [o for o in opportunities if o.profit_percentage >= min_profit]
        if stake != CACHE_STAKE:
            view = [restake_opportunity(o, stake) for o in view]
        return view

    async def get_opportunities(
        self,
        sport: str,
        min_profit: float = 0.0,
        stake: float = 100.0,
    ) -> OpportunityResult:
        """
        Get opportunities for a sport.

        Raises:
            UnknownSportError: If the sport is not supported
            ValueError: If stake is not positive
        """
        sport_enum = Sport.from_string(sport)
        if sport_enum is None:
            self.logger.warning("Invalid sport", sport=sport)
            raise UnknownSportError(sport)

        if stake <= 0:
            raise ValueError(f"Stake must be positive, got {stake}")

        try:
            lookup = await self.cache.get_or_compute(
                sport_enum.value,
                lambda: self._compute(sport_enum),
            )
        except OddsFeedNotConfiguredError:
            self.logger.warning("ODDS_API_KEY not configured")
            return OpportunityResult(
                sport=sport_enum,
                error=NOT_CONFIGURED_ERROR,
                message="The Odds API key is not configured. Please contact the API administrator.",
            )
        except OddsFeedError as e:
            self.logger.error("Odds feed error", sport=sport_enum.value, error=str(e))
            return OpportunityResult(sport=sport_enum, error=str(e), message=str(e))

        cached: CachedOpportunities = lookup.value
        opportunities = self._view(cached.opportunities, min_profit, stake)

        if lookup.hit:
            self.logger.info(
                "Using cached data",
                sport=sport_enum.value,
                age_minutes=lookup.age_minutes,
            )

        return OpportunityResult(
            sport=sport_enum,
            opportunities=opportunities,
            from_cache=lookup.hit,
            cache_age_minutes=lookup.age_minutes if lookup.hit else None,
            matches_analyzed=cached.matches_analyzed,
        )

    def get_metrics(self) -> dict:
        """Cache and feed health, for /health."""
        metrics = {"cache": self.cache.get_metrics()}
        feed_metrics = getattr(self.source, "get_metrics", None)
        if feed_metrics is not None:
            metrics["feed"] = feed_metrics()
        return metrics

    def find_by_id(self, opportunity_id: str, stake: Optional[float] = None) -> Optional[Opportunity]:
        """Look up a still-cached opportunity by id, optionally re-staked."""
        for _, entry in self.cache.fresh_items():
            for opportunity in entry.value.opportunities:
                if opportunity.id == opportunity_id:
                    if stake is not None and stake != opportunity.total_stake:
                        return restake_opportunity(opportunity, stake)
                    return opportunity
        return None
