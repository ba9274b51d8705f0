"""
Odds data feeds.

- The Odds API: Aggregates h2h odds from 40+ bookmakers
"""

from arbedge.feeds.odds_api import OddsAPIFeed

__all__ = [
    "OddsAPIFeed",
]
