"""
Request parameter normalization.

Clients send the sport in different places (JSON body, raw string body,
query string, or nested under "input" by discovery tools). Every route
resolves it here once and then calls the same handler.
"""

import json
from typing import Any, Mapping, Optional

import structlog

logger = structlog.get_logger()


def parse_body(raw: bytes) -> Any:
    """Decode a request body: JSON when possible, else stripped text, else None."""
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def resolve_sport(
    body: Any,
    query: Optional[Mapping[str, Any]],
    default: str,
) -> str:
    """
    Pick the sport parameter.

    Priority: body["sport"], plain string body, query["sport"],
    body["input"]["sport"], then default.
    """
    query = query or {}

    if isinstance(body, dict) and body.get("sport"):
        sport, source = body["sport"], "body"
    elif isinstance(body, str) and body:
        sport, source = body, "body_string"
    elif query.get("sport"):
        sport, source = query["sport"], "query"
    elif isinstance(body, dict) and isinstance(body.get("input"), dict) and body["input"].get("sport"):
        sport, source = body["input"]["sport"], "body_input"
    else:
        sport, source = default, "default"

    sport = str(sport).strip()
    logger.debug("Resolved sport parameter", sport=sport, source=source)
    return sport
