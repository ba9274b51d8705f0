"""Arbitrage detection engine."""

from arbedge.engine.arbitrage import (
    build_opportunity,
    calculate_stake_amounts,
    calculate_three_way_arbitrage,
    calculate_two_way_arbitrage,
    evaluate_match,
    find_arbitrage_opportunities,
    restake_opportunity,
    select_best_price,
)

__all__ = [
    "build_opportunity",
    "calculate_stake_amounts",
    "calculate_three_way_arbitrage",
    "calculate_two_way_arbitrage",
    "evaluate_match",
    "find_arbitrage_opportunities",
    "restake_opportunity",
    "select_best_price",
]
