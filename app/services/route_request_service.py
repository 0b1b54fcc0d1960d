# app/services/route_request_service.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional, Tuple
import logging

from fieldroute.context import ViewerContext
from fieldroute.errors import InvalidInput, NotFound
from fieldroute.models import Route

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "ROUTE_REQUEST"


def parse_route_message(message: str) -> Tuple[str, str, str]:
    """'ROUTE_REQUEST:<source>:<destination>:<type>' -> (source, destination, type)"""
    parts = message.split(":")
    if len(parts) < 4 or parts[0] != MESSAGE_PREFIX:
        raise InvalidInput(f"Invalid route request format: {message!r}")
    return parts[1], parts[2], parts[3]


def handle_route_request(ctx: ViewerContext, source_name: str, destination_name: str,
                         route_type: Optional[str] = None) -> Route:
    """
    Resolve both wells by name (case-insensitive), store a direct route in the
    catalog and annotate it with the request.
    """
    src = ctx.catalog.get_well_by_name(source_name)
    dst = ctx.catalog.get_well_by_name(destination_name)
    missing = [n for n, w in ((source_name, src), (destination_name, dst)) if w is None]
    if missing:
        logger.warning("route request rejected, unknown well(s): %s", missing)
        raise NotFound("well", ", ".join(missing))

    unlocated = [w.name for w in (src, dst) if w.location is None]
    if unlocated:
        raise InvalidInput(f"well(s) without a location: {', '.join(unlocated)}")

    route_type = route_type or ctx.options.route_type
    route = ctx.catalog.create_route(
        src.id, dst.id, f"Route from {source_name} to {destination_name} ({route_type})"
    )
    route.route_type = route_type
    route.metadata = {
        "RouteType": route_type,
        "SourceWell": source_name,
        "DestinationWell": destination_name,
        "CreatedAt": datetime.now(timezone.utc),
    }
    route.recompute(ctx.options.average_speed_kmh)
    return route
