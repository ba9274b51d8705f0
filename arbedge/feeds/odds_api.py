"""
The Odds API Feed.

Aggregates head-to-head odds from 40+ sportsbooks (DraftKings, FanDuel,
Pinnacle, Betfair, ...). Free tier: 500 requests/month.

API Docs: https://the-odds-api.com/liveapi/guides/v4/

Key endpoint:
- /sports/{sport}/odds: Get odds for upcoming events

Odds are requested in decimal format for the h2h market only and turned
into Match records ready for the arbitrage engine.
"""

import math
import ssl
import time
from typing import Optional

import certifi
import httpx
import structlog

from arbedge.config.settings import OddsAPISettings
from arbedge.exceptions import OddsFeedError, OddsFeedNotConfiguredError
from arbedge.models.schemas import DRAW_OUTCOME, Match, OddsQuote, Sport

logger = structlog.get_logger()


class OddsAPIFeed:
    """
    On-demand odds feed from The Odds API.

    Usage:
        async with OddsAPIFeed(settings.odds_api) as feed:
            matches = await feed.fetch_matches(Sport.BASKETBALL)
    """

    def __init__(
        self,
        config: Optional[OddsAPISettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or OddsAPISettings()
        self._transport = transport

        self.logger = logger.bind(feed="odds_api")

        # HTTP client
        self._http_client: Optional[httpx.AsyncClient] = None

        # Quota tracking
        self._requests_remaining: Optional[int] = None
        self._requests_used: int = 0

        # Health
        self._error_count: int = 0
        self._last_success_ms: int = 0

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Open the HTTP client."""
        if self._http_client is not None:
            return

        self.logger.info("Starting Odds API feed", configured=self.is_configured)

        if self._transport is not None:
            self._http_client = httpx.AsyncClient(
                transport=self._transport,
                timeout=self.config.request_timeout_seconds,
                headers={"Accept": "application/json"},
            )
        else:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            self._http_client = httpx.AsyncClient(
                verify=ssl_context,
                timeout=self.config.request_timeout_seconds,
                headers={"Accept": "application/json"},
            )

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            self.logger.info("Stopping Odds API feed")
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "OddsAPIFeed":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # =========================================================================
    # API Calls
    # =========================================================================

    async def _make_request(self, endpoint: str, params: Optional[dict] = None) -> list:
        """Make an API request, raising OddsFeedError on any failure."""
        if not self.is_configured:
            raise OddsFeedNotConfiguredError("ODDS_API_KEY not configured")

        if self._http_client is None:
            await self.start()

        url = f"{self.config.base_url}{endpoint}"
        full_params = {"apiKey": self.config.api_key}
        if params:
            full_params.update(params)

        try:
            response = await self._http_client.get(url, params=full_params)
        except httpx.HTTPError as e:
            self._error_count += 1
            self.logger.error("Request failed", endpoint=endpoint, error=str(e))
            raise OddsFeedError(f"Request to The Odds API failed: {e}") from e

        # Track usage from headers
        if "x-requests-remaining" in response.headers:
            self._requests_remaining = int(float(response.headers["x-requests-remaining"]))
        if "x-requests-used" in response.headers:
            self._requests_used = int(float(response.headers["x-requests-used"]))

        if response.status_code != 200:
            self._error_count += 1
            self.logger.warning(
                "API error",
                endpoint=endpoint,
                status=response.status_code,
                body=response.text[:200],
            )
            raise OddsFeedError(
                f"The Odds API returned {response.status_code} - {response.reason_phrase}"
            )

        self._last_success_ms = int(time.time() * 1000)
        self.logger.debug(
            "API request",
            endpoint=endpoint,
            used=self._requests_used,
            remaining=self._requests_remaining,
        )

        try:
            data = response.json()
        except ValueError as e:
            self._error_count += 1
            self.logger.error("Invalid JSON", endpoint=endpoint, body=response.text[:200])
            raise OddsFeedError("Invalid JSON from The Odds API") from e

        return data if isinstance(data, list) else []

    async def fetch_matches(self, sport: Sport) -> list[Match]:
        """
        Fetch upcoming matches with every bookmaker's h2h decimal odds.

        Returns:
            Matches quoted by at least min_bookmakers bookmakers

        Raises:
            OddsFeedNotConfiguredError: If no API key is set
            OddsFeedError: On request failure, non-200 answer or no events
        """
        sport_config = sport.config
        self.logger.info("Fetching odds", sport=sport.value, sport_key=sport_config.api_key)

        params = {
            "regions": self.config.regions,
            "markets": self.config.markets,
            "oddsFormat": self.config.odds_format,
        }
        games = await self._make_request(f"/sports/{sport_config.api_key}/odds", params)

        if not games:
            raise OddsFeedError(
                f"No active events found for {sport.value}. "
                f"Season may be off or no matches scheduled."
            )

        matches = []
        for game in games:
            match = self._parse_game(game, sport)
            if match:
                matches.append(match)

        self.logger.info(
            "Fetched matches",
            sport=sport.value,
            games=len(games),
            matches=len(matches),
            requests_remaining=self._requests_remaining,
        )
        return matches

    # =========================================================================
    # Parsing
    # =========================================================================

    def _parse_game(self, game: dict, sport: Sport) -> Optional[Match]:
        """Parse one API event into a Match, or None if too few bookmakers."""
        home_team = game.get("home_team", "")
        away_team = game.get("away_team", "")

        quotes = []
        for book_data in game.get("bookmakers", []):
            quote = self._parse_bookmaker_quote(book_data, home_team, away_team)
            if quote:
                quotes.append(quote)

        if len(quotes) < self.config.min_bookmakers:
            return None

        return Match(
            name=f"{home_team} vs {away_team}",
            league=sport.config.display_name,
            start_time=game.get("commence_time"),
            has_draw_market=sport.config.has_draw,
            quotes=tuple(quotes),
            sport=sport.value,
        )

    def _parse_bookmaker_quote(
        self,
        data: dict,
        home_team: str,
        away_team: str,
    ) -> Optional[OddsQuote]:
        """Parse a bookmaker's h2h market; None unless home and away are priced."""
        market = next(
            (m for m in data.get("markets", []) if m.get("key") == "h2h"),
            None,
        )
        if not market or not market.get("outcomes"):
            return None

        prices = {}
        for outcome in market["outcomes"]:
            try:
                price = float(outcome.get("price"))
            except (TypeError, ValueError):
                price = None
            if price is None or not math.isfinite(price):
                self.logger.debug(
                    "Skipping unparseable price",
                    bookmaker=data.get("key"),
                    outcome=outcome.get("name"),
                )
                continue
            prices[outcome.get("name")] = price

        if home_team not in prices or away_team not in prices:
            return None

        return OddsQuote(
            outcome1_name=home_team,
            outcome2_name=away_team,
            bookmaker=data.get("title") or data.get("key", ""),
            odds1=prices[home_team],
            odds2=prices[away_team],
            draw_odds=prices.get(DRAW_OUTCOME),
        )

    # =========================================================================
    # Metrics
    # =========================================================================

    def get_metrics(self) -> dict:
        """Get feed health metrics."""
        return {
            "name": "odds_api",
            "configured": self.is_configured,
            "requests_remaining": self._requests_remaining,
            "requests_used": self._requests_used,
            "error_count": self._error_count,
            "age_seconds": (int(time.time() * 1000) - self._last_success_ms) / 1000 if self._last_success_ms else 0,
        }
