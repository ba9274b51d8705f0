"""Tests for The Odds API feed."""

import httpx
import pytest

from arbedge.config.settings import OddsAPISettings
from arbedge.exceptions import OddsFeedError, OddsFeedNotConfiguredError
from arbedge.feeds.odds_api import OddsAPIFeed
from arbedge.models.schemas import Sport


def h2h_bookmaker(key, title, prices):
    return {
        "key": key,
        "title": title,
        "last_update": "2026-10-17T12:00:00Z",
        "markets": [{
            "key": "h2h",
            "outcomes": [{"name": name, "price": price} for name, price in prices.items()],
        }],
    }


@pytest.fixture
def soccer_games():
    """Two EPL games: one with 3 bookmakers, one with only 1."""
    return [
        {
            "id": "evt1",
            "sport_key": "soccer_epl",
            "commence_time": "2026-10-18T14:00:00Z",
            "home_team": "Arsenal",
            "away_team": "Chelsea",
            "bookmakers": [
                h2h_bookmaker("bet365", "Bet365", {"Arsenal": 3.10, "Chelsea": 2.50, "Draw": 3.40}),
                h2h_bookmaker("unibet", "Unibet", {"Arsenal": 2.90, "Chelsea": 2.70, "Draw": 3.60}),
                # Missing away price: skipped
                h2h_bookmaker("partial", "Partial", {"Arsenal": 4.00, "Draw": 3.00}),
            ],
        },
        {
            "id": "evt2",
            "sport_key": "soccer_epl",
            "commence_time": "2026-10-18T16:30:00Z",
            "home_team": "Leeds",
            "away_team": "Everton",
            "bookmakers": [
                h2h_bookmaker("bet365", "Bet365", {"Leeds": 2.10, "Everton": 3.50, "Draw": 3.30}),
            ],
        },
    ]


def make_feed(handler, api_key="test-key"):
    config = OddsAPISettings(api_key=api_key)
    return OddsAPIFeed(config, transport=httpx.MockTransport(handler))


class TestOddsAPIFeed:
    """Tests for OddsAPIFeed.fetch_matches."""

    @pytest.mark.asyncio
    async def test_parses_matches(self, soccer_games):
        """Test conversion of API games into matches."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json=soccer_games,
                headers={"x-requests-remaining": "480", "x-requests-used": "20"},
            )

        async with make_feed(handler) as feed:
            matches = await feed.fetch_matches(Sport.SOCCER)
            metrics = feed.get_metrics()

        assert seen["path"] == "/v4/sports/soccer_epl/odds"
        assert seen["params"]["apiKey"] == "test-key"
        assert seen["params"]["markets"] == "h2h"
        assert seen["params"]["oddsFormat"] == "decimal"
        assert seen["params"]["regions"] == "us,uk,eu"

        # evt2 has a single bookmaker and is dropped
        assert len(matches) == 1
        match = matches[0]
        assert match.name == "Arsenal vs Chelsea"
        assert match.league == "Soccer - Premier League"
        assert match.start_time == "2026-10-18T14:00:00Z"
        assert match.has_draw_market is True
        assert match.sport == "soccer"
        assert match.bookmakers == ["Bet365", "Unibet"]

        first = match.quotes[0]
        assert (first.outcome1_name, first.outcome2_name) == ("Arsenal", "Chelsea")
        assert (first.odds1, first.odds2, first.draw_odds) == (3.10, 2.50, 3.40)

        assert metrics["requests_remaining"] == 480
        assert metrics["requests_used"] == 20

    @pytest.mark.asyncio
    async def test_two_way_sport_has_no_draw(self):
        """Test that NBA games are flagged as 2-way markets."""
        games = [{
            "home_team": "Lakers",
            "away_team": "Celtics",
            "commence_time": "2026-10-18T00:30:00Z",
            "bookmakers": [
                h2h_bookmaker("draftkings", "DraftKings", {"Lakers": 2.10, "Celtics": 1.80}),
                h2h_bookmaker("fanduel", "FanDuel", {"Lakers": 1.90, "Celtics": 1.95}),
            ],
        }]

        async with make_feed(lambda request: httpx.Response(200, json=games)) as feed:
            matches = await feed.fetch_matches(Sport.BASKETBALL)

        assert len(matches) == 1
        assert matches[0].has_draw_market is False
        assert matches[0].quotes[0].draw_odds is None

    @pytest.mark.asyncio
    async def test_non_finite_prices_are_skipped(self):
        """Test that bookmakers quoting NaN/inf prices are dropped."""
        games = [{
            "home_team": "Lakers",
            "away_team": "Celtics",
            "commence_time": "2026-10-18T00:30:00Z",
            "bookmakers": [
                h2h_bookmaker("nanbook", "NaNBook", {"Lakers": "NaN", "Celtics": 1.90}),
                h2h_bookmaker("infbook", "InfBook", {"Lakers": "inf", "Celtics": 1.90}),
                h2h_bookmaker("draftkings", "DraftKings", {"Lakers": 2.00, "Celtics": 1.90}),
                h2h_bookmaker("fanduel", "FanDuel", {"Lakers": 1.95, "Celtics": 1.85}),
            ],
        }]

        async with make_feed(lambda request: httpx.Response(200, json=games)) as feed:
            matches = await feed.fetch_matches(Sport.BASKETBALL)

        assert matches[0].bookmakers == ["DraftKings", "FanDuel"]

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test that a non-JSON 200 answer raises OddsFeedError."""
        async with make_feed(lambda request: httpx.Response(200, content=b"<html>")) as feed:
            with pytest.raises(OddsFeedError, match="Invalid JSON"):
                await feed.fetch_matches(Sport.SOCCER)

            assert feed.get_metrics()["error_count"] == 1

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        """Test that an unconfigured feed refuses to call the API."""
        def handler(request):
            raise AssertionError("no request expected")

        async with make_feed(handler, api_key="") as feed:
            with pytest.raises(OddsFeedNotConfiguredError):
                await feed.fetch_matches(Sport.SOCCER)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """Test that non-200 answers raise OddsFeedError."""
        async with make_feed(lambda request: httpx.Response(401, text="bad key")) as feed:
            with pytest.raises(OddsFeedError, match="401"):
                await feed.fetch_matches(Sport.NFL)

            assert feed.get_metrics()["error_count"] == 1

    @pytest.mark.asyncio
    async def test_no_events(self):
        """Test that an empty schedule is reported as an error."""
        async with make_feed(lambda request: httpx.Response(200, json=[])) as feed:
            with pytest.raises(OddsFeedError, match="No active events"):
                await feed.fetch_matches(Sport.MLB)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test that connection failures raise OddsFeedError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_feed(handler) as feed:
            with pytest.raises(OddsFeedError, match="failed"):
                await feed.fetch_matches(Sport.TENNIS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
