"""Pydantic response models for the HTTP API."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class FormattedOpportunity(BaseModel):
    id: str
    match: str
    league: str
    profit: str               # "1.11% guaranteed"
    guaranteed_profit: str    # "$1.11"
    total_stake: str          # "$100"
    instructions: str         # "Lakers: $48.15 @ 2.1 on DraftKings | ..."
    start_time: Optional[str] = None


class OpportunitiesResponse(BaseModel):
    success: bool
    sport: str
    summary: str
    count: int
    avg_profit: str
    opportunities: List[FormattedOpportunity]
    data_source: str
    matches_analyzed: int = 0
    error: Optional[str] = None
    message: Optional[str] = None
    timestamp: datetime


class OpportunityDetailResponse(BaseModel):
    success: bool
    opportunity: Dict[str, Any]


class SportsListResponse(BaseModel):
    success: bool
    sports: List[str]
    count: int


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    cache: Optional[Dict[str, Any]] = None
    feed: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    valid_options: Optional[List[str]] = None
