"""
ArbitrageEdge API - Main Entry Point.

Serves sports betting arbitrage opportunities over HTTP:
1. Fetch h2h odds from The Odds API (on demand, cached per sport)
2. Find the best price per outcome across bookmakers
3. Report matches where backing every outcome guarantees a profit

Usage:
    python -m arbedge

Environment Variables:
    ODDS_API_KEY       - The Odds API key (required for live data)
    CACHE_TTL_SECONDS  - Opportunity cache lifetime (default: 1800)
    SERVER_HOST        - Bind address (default: 0.0.0.0)
    SERVER_PORT        - Port (default: 3000)
    LOG_LEVEL          - DEBUG|INFO|WARNING|ERROR (default: INFO)
"""

import uvicorn

from arbedge.api.app import create_app
from arbedge.config import settings
from arbedge.utils.logging import setup_logging


def main() -> None:
    """Main entry point."""
    setup_logging(settings.log_level)

    app = create_app(settings)

    # Single worker: the opportunity cache lives in process memory
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
        workers=1,
    )


if __name__ == "__main__":
    main()
