"""
FastAPI application for the ArbitrageEdge API.

Routes:
- GET  /health                              health check
- GET  /api                                 endpoint catalogue
- GET  /api/opportunities/sports/list       supported sports
- GET  /api/opportunities                   "select a sport" hint
- POST /api/opportunities/sport             sport from body/query/body.input
- GET  /api/opportunities/sport             sport from query
- GET  /api/opportunities/sport/{sport}     sport from path
- GET  /api/opportunities/{opportunity_id}  cached opportunity lookup

All opportunity routes resolve their parameters and share one handler.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arbedge.api.formatting import build_opportunities_response
from arbedge.api.models import (
    ErrorResponse,
    HealthResponse,
    OpportunitiesResponse,
    OpportunityDetailResponse,
    SportsListResponse,
)
from arbedge.api.params import parse_body, resolve_sport
from arbedge.api.service import OpportunityService
from arbedge.config.settings import Settings
from arbedge.exceptions import UnknownSportError
from arbedge.feeds.odds_api import OddsAPIFeed
from arbedge.models.schemas import SUPPORTED_SPORTS
from arbedge.utils.cache import TTLCache

logger = structlog.get_logger()


def create_app(
    config: Optional[Settings] = None,
    service: Optional[OpportunityService] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Settings to use (defaults to the global settings)
        service: Pre-built service; when omitted one is created around an
            OddsAPIFeed whose HTTP client lives for the app's lifespan
    """
    if config is None:
        from arbedge.config import settings as config

    log = logger.bind(component="api")
    feed: Optional[OddsAPIFeed] = None

    if service is None:
        feed = OddsAPIFeed(config.odds_api)
        service = OpportunityService(feed, TTLCache(ttl_seconds=config.cache.ttl_seconds))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(
            "Starting ArbitrageEdge API",
            version=config.version,
            odds_api_configured=bool(config.odds_api.api_key),
            cache_ttl_seconds=config.cache.ttl_seconds,
        )
        if feed is not None:
            await feed.start()
        yield
        if feed is not None:
            await feed.stop()
        log.info("ArbitrageEdge API stopped")

    app = FastAPI(
        title=f"{config.api_name} API",
        description="Real-time sports betting arbitrage opportunities",
        version=config.version,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error handlers
    # =========================================================================

    @app.exception_handler(UnknownSportError)
    async def unknown_sport_handler(request: Request, exc: UnknownSportError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error=f"Invalid sport: {exc.sport}",
                valid_options=SUPPORTED_SPORTS,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.error(
            "Unhandled error",
            path=request.url.path,
            error=str(exc),
            exc_info=exc,
        )
        content = {
            "success": False,
            "error": "Failed to fetch opportunities",
            "message": str(exc),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        # Set by handle_opportunities once the sport parameter is resolved
        sport = getattr(request.state, "sport", None)
        if sport:
            content["sport"] = sport.lower()
            content["summary"] = f"❌ Error fetching {sport} opportunities: {exc}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )

    # =========================================================================
    # Shared handler
    # =========================================================================

    async def handle_opportunities(
        request: Request,
        sport: str,
        min_profit: float,
        stake: float,
    ) -> OpportunitiesResponse:
        request.state.sport = sport
        log.info("Opportunities requested", sport=sport, min_profit=min_profit, stake=stake)
        result = await app.state.service.get_opportunities(sport, min_profit=min_profit, stake=stake)
        log.info(
            "Sending opportunities",
            sport=result.sport.value,
            count=len(result.opportunities),
            from_cache=result.from_cache,
            error=result.error,
        )
        return build_opportunities_response(result)

    defaults = config.opportunities

    # =========================================================================
    # Free endpoints
    # =========================================================================

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            version=config.version,
            **app.state.service.get_metrics(),
        )

    @app.get("/api", tags=["health"])
    async def api_index() -> dict[str, Any]:
        """Endpoint catalogue."""
        return {
            "name": f"{config.api_name} API",
            "version": config.version,
            "description": "Real-time sports betting arbitrage opportunities",
            "endpoints": {
                "GET /api/opportunities/sport/{sport}": {
                    "description": "Get arbitrage opportunities for a specific sport",
                    "sports": SUPPORTED_SPORTS,
                    "query_params": {"min_profit": "number", "stake": "number"},
                },
                "POST /api/opportunities/sport": {
                    "description": "Same as above with the sport in the JSON body",
                    "body": {"sport": "string"},
                },
                "GET /api/opportunities/sports/list": {
                    "description": "List supported sports",
                },
                "GET /api/opportunities/{id}": {
                    "description": "Look up a recently detected opportunity",
                },
            },
        }

    @app.get(
        "/api/opportunities/sports/list",
        tags=["opportunities"],
        response_model=SportsListResponse,
    )
    async def list_sports() -> SportsListResponse:
        return SportsListResponse(success=True, sports=SUPPORTED_SPORTS, count=len(SUPPORTED_SPORTS))

    @app.get("/api/opportunities", tags=["opportunities"])
    async def select_sport_hint() -> dict[str, Any]:
        return {
            "success": False,
            "message": "Please select a sport",
            "endpoint": "/api/opportunities/sport/:sport",
            "available_sports": SUPPORTED_SPORTS,
            "example": "/api/opportunities/sport/soccer",
        }

    # =========================================================================
    # Opportunity endpoints
    # =========================================================================

    @app.post(
        "/api/opportunities/sport",
        tags=["opportunities"],
        response_model=OpportunitiesResponse,
    )
    async def post_sport_opportunities(
        request: Request,
        min_profit: float = Query(defaults.default_min_profit),
        stake: float = Query(defaults.default_stake, gt=0),
    ) -> OpportunitiesResponse:
        body = parse_body(await request.body())
        sport = resolve_sport(body, request.query_params, defaults.default_sport)
        return await handle_opportunities(request, sport, min_profit, stake)

    @app.get(
        "/api/opportunities/sport",
        tags=["opportunities"],
        response_model=OpportunitiesResponse,
    )
    async def get_sport_opportunities(
        request: Request,
        min_profit: float = Query(defaults.default_min_profit),
        stake: float = Query(defaults.default_stake, gt=0),
    ) -> OpportunitiesResponse:
        sport = resolve_sport(None, request.query_params, defaults.default_sport)
        return await handle_opportunities(request, sport, min_profit, stake)

    @app.get(
        "/api/opportunities/sport/{sport}",
        tags=["opportunities"],
        response_model=OpportunitiesResponse,
    )
    async def get_path_sport_opportunities(
        request: Request,
        sport: str,
        min_profit: float = Query(defaults.default_min_profit),
        stake: float = Query(defaults.default_stake, gt=0),
    ) -> OpportunitiesResponse:
        return await handle_opportunities(request, sport, min_profit, stake)

    @app.get(
        "/api/opportunities/{opportunity_id}",
        tags=["opportunities"],
        response_model=OpportunityDetailResponse,
        responses={404: {"model": ErrorResponse}},
    )
    async def get_opportunity(
        opportunity_id: str,
        stake: Optional[float] = Query(None, gt=0),
    ):
        opportunity = app.state.service.find_by_id(opportunity_id, stake=stake)
        if opportunity is None:
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=ErrorResponse(error="Opportunity not found or expired").model_dump(),
            )
        return OpportunityDetailResponse(success=True, opportunity=opportunity.to_dict())

    return app
