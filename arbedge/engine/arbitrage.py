"""
Arbitrage Detection Engine.

Given the odds quoted by several bookmakers for the same match, finds the
best price per outcome and checks whether backing every outcome at those
prices guarantees a profit.

The core pattern:
    Best price per outcome = highest decimal odds across bookmakers
    Implied probability    = 1 / odds
    Arbitrage              = sum(implied probabilities) < 1.0
    Stake split            = implied_prob_i / total * 100  (equal payout)

Everything here is pure and synchronous: no I/O, no shared state. Matches
are evaluated independently, so calls may run concurrently.
"""

import math
import time
from datetime import datetime, timezone
from functools import reduce
from typing import Iterable, Optional, Sequence
from uuid import uuid4

from arbedge.models.schemas import (
    DRAW_OUTCOME,
    ArbitrageLeg,
    ArbitrageResult,
    BestPrice,
    Match,
    MatchInfo,
    OddsQuote,
    Opportunity,
    OutcomeSlot,
    StakedLeg,
)


# =============================================================================
# Best-Price Selection
# =============================================================================

def select_best_price(
    quotes: Iterable[OddsQuote],
    slot: OutcomeSlot,
) -> Optional[BestPrice]:
    """
    Find the highest odds offered for an outcome slot.

    Only strictly higher prices replace the current best, so on ties the
    first bookmaker encountered wins. Quotes without a positive, finite
    price for the slot are ignored.

    Returns:
        BestPrice, or None if no quote offers the slot
    """
    def keep_best(best: Optional[BestPrice], quote: OddsQuote) -> Optional[BestPrice]:
        odds = quote.odds_for(slot)
        if odds is None or not math.isfinite(odds) or odds <= 0:
            return best
        if best is None or odds > best.odds:
            return BestPrice(odds=odds, bookmaker=quote.bookmaker)
        return best

    return reduce(keep_best, quotes, None)


# =============================================================================
# Calculators
# =============================================================================

def _calculate_arbitrage(
    priced_outcomes: Sequence[tuple[str, Optional[BestPrice]]],
) -> Optional[ArbitrageResult]:
    """Shared 2-way/3-way calculation over (outcome name, best price) pairs."""
    if any(best is None for _, best in priced_outcomes):
        return None

    implied_probs = [best.implied_prob for _, best in priced_outcomes]
    total_implied_prob = sum(implied_probs)

    # Exactly 1.0 means the books' margin eats any discrepancy; NaN never qualifies
    if not total_implied_prob < 1.0:
        return None

    profit_percentage = (1 / total_implied_prob - 1) * 100

    # Rounded independently, not renormalized to 100
    legs = tuple(
        ArbitrageLeg(
            outcome=name,
            bookmaker=best.bookmaker,
            odds=best.odds,
            stake_pct=round(prob / total_implied_prob * 100, 2),
        )
        for (name, best), prob in zip(priced_outcomes, implied_probs)
    )

    return ArbitrageResult(
        profit_percentage=round(profit_percentage, 2),
        legs=legs,
        total_implied_probability=total_implied_prob,
    )


def calculate_two_way_arbitrage(quotes: Sequence[OddsQuote]) -> Optional[ArbitrageResult]:
    """
    Check a 2-way market (no draw) for arbitrage.

    Args:
        quotes: Every bookmaker quote for the match

    Returns:
        ArbitrageResult with legs [outcome1, outcome2], or None if no
        guaranteed profit exists
    """
    if not quotes:
        return None

    first = quotes[0]
    return _calculate_arbitrage([
        (first.outcome1_name, select_best_price(quotes, OutcomeSlot.OUTCOME1)),
        (first.outcome2_name, select_best_price(quotes, OutcomeSlot.OUTCOME2)),
    ])


def calculate_three_way_arbitrage(quotes: Sequence[OddsQuote]) -> Optional[ArbitrageResult]:
    """
    Check a 3-way market (1X2) for arbitrage.

    A draw price is mandatory: if no quote carries one the match never
    yields an opportunity, however good the other two prices are.

    Returns:
        ArbitrageResult with legs [outcome1, Draw, outcome2], or None
    """
    if not quotes:
        return None

    first = quotes[0]
    return _calculate_arbitrage([
        (first.outcome1_name, select_best_price(quotes, OutcomeSlot.OUTCOME1)),
        (DRAW_OUTCOME, select_best_price(quotes, OutcomeSlot.DRAW)),
        (first.outcome2_name, select_best_price(quotes, OutcomeSlot.OUTCOME2)),
    ])


def evaluate_match(match: Match) -> Optional[ArbitrageResult]:
    """Run the calculator matching the market type of a match."""
    if match.has_draw_market:
        return calculate_three_way_arbitrage(match.quotes)
    return calculate_two_way_arbitrage(match.quotes)


# =============================================================================
# Stake Amounts & Opportunity Assembly
# =============================================================================

def calculate_stake_amounts(
    legs: Iterable[ArbitrageLeg],
    total_stake: float,
) -> tuple[StakedLeg, ...]:
    """
    Turn stake percentages into money amounts for a total stake.

    stake_amount     = round(total_stake * stake_pct / 100, 2)
    potential_return = round(stake_amount * odds, 2)

    Raises:
        ValueError: If total_stake is not positive
    """
    if total_stake <= 0:
        raise ValueError(f"Total stake must be positive, got {total_stake}")

    staked = []
    for leg in legs:
        stake_amount = round(total_stake * leg.stake_pct / 100, 2)
        staked.append(StakedLeg(
            outcome=leg.outcome,
            bookmaker=leg.bookmaker,
            odds=leg.odds,
            stake_pct=leg.stake_pct,
            stake_amount=stake_amount,
            potential_return=round(stake_amount * leg.odds, 2),
        ))
    return tuple(staked)


def generate_opportunity_id() -> str:
    """Unique id: arb_<epoch ms>_<9 random hex chars>."""
    return f"arb_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


def build_opportunity(
    match: Match,
    result: ArbitrageResult,
    total_stake: float = 100.0,
) -> Opportunity:
    """Enrich an arbitrage result with match metadata and stake amounts."""
    return Opportunity(
        id=generate_opportunity_id(),
        match=MatchInfo(
            name=match.name,
            league=match.league,
            start_time=match.start_time,
            sport=match.sport,
        ),
        profit_percentage=result.profit_percentage,
        total_stake=total_stake,
        guaranteed_profit=round(total_stake * result.profit_percentage / 100, 2),
        bets=calculate_stake_amounts(result.legs, total_stake),
        detected_at=datetime.now(timezone.utc),
    )


def restake_opportunity(opportunity: Opportunity, total_stake: float) -> Opportunity:
    """
    Recompute money amounts of an opportunity for another total stake.

    Percentages, id and detection time are kept.
    """
    legs = [
        ArbitrageLeg(
            outcome=bet.outcome,
            bookmaker=bet.bookmaker,
            odds=bet.odds,
            stake_pct=bet.stake_pct,
        )
        for bet in opportunity.bets
    ]
    return Opportunity(
        id=opportunity.id,
        match=opportunity.match,
        profit_percentage=opportunity.profit_percentage,
        total_stake=total_stake,
        guaranteed_profit=round(total_stake * opportunity.profit_percentage / 100, 2),
        bets=calculate_stake_amounts(legs, total_stake),
        detected_at=opportunity.detected_at,
    )


def find_arbitrage_opportunities(
    matches: Iterable[Match],
    min_profit: float = 0.0,
    total_stake: float = 100.0,
) -> list[Opportunity]:
    """
    Find every arbitrage opportunity in a list of matches.

    Args:
        matches: Matches with their bookmaker quotes
        min_profit: Minimum guaranteed profit percentage to keep
        total_stake: Capital to split across the legs of each opportunity

    Returns:
        Opportunities sorted by profit percentage, highest first (stable)
    """
    opportunities = []

    for match in matches:
        result = evaluate_match(match)
        if result is None or not result.exists:
            continue
        if result.profit_percentage < min_profit:
            continue
        opportunities.append(build_opportunity(match, result, total_stake))

    opportunities.sort(key=lambda opp: opp.profit_percentage, reverse=True)
    return opportunities
