"""
Response formatting.

Turns an OpportunityResult into the JSON payload returned to clients:
human-readable summary, per-bet instructions and data source label.
"""

from datetime import datetime, timezone
from typing import Optional

from arbedge.api.models import FormattedOpportunity, OpportunitiesResponse
from arbedge.api.service import NOT_CONFIGURED_ERROR, OpportunityResult
from arbedge.models.schemas import Opportunity, Sport


def format_amount(value: float) -> str:
    """100.0 -> "100", 250.5 -> "250.5", 1.109 -> "1.11"."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_instructions(opportunity: Opportunity) -> str:
    """One "Outcome: $stake @ odds on Bookmaker" clause per bet."""
    return " | ".join(
        f"{bet.outcome}: ${bet.stake_amount:.2f} @ {bet.odds:g} on {bet.bookmaker}"
        for bet in opportunity.bets
    )


def format_opportunity(opportunity: Opportunity, sport: Sport) -> FormattedOpportunity:
    return FormattedOpportunity(
        id=opportunity.id,
        match=opportunity.match.name or "Unknown",
        league=opportunity.match.league or sport.config.display_name,
        profit=f"{opportunity.profit_percentage}% guaranteed",
        guaranteed_profit=f"${opportunity.guaranteed_profit:.2f}",
        total_stake=f"${format_amount(opportunity.total_stake)}",
        instructions=format_instructions(opportunity) or "N/A",
        start_time=opportunity.match.start_time,
    )


def build_summary(result: OpportunityResult) -> str:
    emoji = result.sport.config.emoji
    name = result.sport.display_name
    count = len(result.opportunities)

    if result.error == NOT_CONFIGURED_ERROR:
        return "⚠️ API not configured. Please set ODDS_API_KEY in environment variables."
    if count:
        noun = "opportunity" if count == 1 else "opportunities"
        return (
            f"{emoji} Found {count} arbitrage {noun} in {name} "
            f"with avg {result.avg_profit:.1f}% guaranteed profit"
        )
    return (
        f"{emoji} No arbitrage opportunities currently available for {name}. "
        f"True arbitrage opportunities are rare and short-lived. "
        f"Try again later or check another sport."
    )


def data_source(result: OpportunityResult) -> str:
    if result.from_cache:
        return f"cached ({result.cache_age_minutes} min old)"
    if result.error:
        return f"error: {result.error}"
    return "The Odds API"


def build_opportunities_response(
    result: OpportunityResult,
    now: Optional[datetime] = None,
) -> OpportunitiesResponse:
    avg_profit = result.avg_profit
    return OpportunitiesResponse(
        success=True,
        sport=result.sport.value,
        summary=build_summary(result),
        count=len(result.opportunities),
        avg_profit=f"{avg_profit:.1f}%" if avg_profit is not None else "N/A",
        opportunities=[format_opportunity(o, result.sport) for o in result.opportunities],
        data_source=data_source(result),
        matches_analyzed=result.matches_analyzed,
        error=result.error,
        message=result.message,
        timestamp=now or datetime.now(timezone.utc),
    )
