"""
ArbitrageEdge: sports betting arbitrage API.

Finds combinations of bets across bookmakers that profit whatever the
outcome of a match.

Architecture:
- engine/: Pure arbitrage detection (best prices, stake split, assembly)
- feeds/: The Odds API client producing matches
- models/: Sports, odds, results and opportunity schemas
- api/: FastAPI app, request normalization, caching service, formatting
"""

__version__ = "2.0.0"
