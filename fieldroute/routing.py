# fieldroute/routing.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np

from .catalog import SpatialCatalog
from .context import RoutingOptions
from .errors import InvalidInput
from .geo import GeoPoint, haversine_km
from .hull import convex_hull, hull_area_km2, hull_perimeter_km
from .models import Field, Route, Well, travel_minutes

logger = logging.getLogger(__name__)


@dataclass
class FieldRoutingStatistics:
    total_possible_routes: int
    average_well_distance: float
    min_well_distance: float
    max_well_distance: float
    total_field_perimeter: float
    field_area: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


class RoutingEngine:
    """
    Great-circle routing between wells of a `SpatialCatalog`.

    Every query reads the catalog as it is at call time; nothing is cached
    between calls. Unresolvable well/field ids give None (or an empty list),
    structurally degenerate input raises `InvalidInput`.
    """

    def __init__(self, catalog: SpatialCatalog, options: Optional[RoutingOptions] = None):
        if catalog is None:
            raise InvalidInput("RoutingEngine requires a catalog")
        self.catalog = catalog
        self.options = options or RoutingOptions()

    # -------------------- metrics --------------------

    def calculate_route_distance(self, route: Route) -> float:
        return route.waypoint_distance()

    def estimate_travel_time(self, distance_km: float, average_speed_kmh: Optional[float] = None) -> float:
        """Minutes at a constant average speed; 0 for non-positive inputs."""
        speed = self.options.average_speed_kmh if average_speed_kmh is None else average_speed_kmh
        return travel_minutes(distance_km, speed)

    @staticmethod
    def _require_location(*wells: Well) -> None:
        for w in wells:
            if w.location is None:
                raise InvalidInput(f"well '{w.name}' has no location")

    def _finish(self, route: Route, route_type: Optional[str] = None) -> Route:
        route.total_distance = self.calculate_route_distance(route)
        route.estimated_time = self.estimate_travel_time(route.total_distance)
        route.route_type = route_type or self.options.route_type
        return route

    # -------------------- point-to-point --------------------

    def find_shortest_route(self, source_well_id: str, destination_well_id: str,
                            include_waypoints: bool = False) -> Optional[Route]:
        src = self.catalog.get_well(source_well_id)
        dst = self.catalog.get_well(destination_well_id)
        if src is None or dst is None:
            return None

        self._require_location(src, dst)
        route = Route(src, dst)
        if include_waypoints:
            for w in self.find_intermediate_wells(src, dst):
                route.add_waypoint(w.location)
        self._finish(route)
        logger.debug("shortest %s -> %s: %.3f km, %d waypoints",
                     src.name, dst.name, route.total_distance, len(route.waypoints))
        return route

    def find_all_routes(self, source_well_id: str, destination_well_id: str,
                        max_routes: Optional[int] = None) -> List[Route]:
        max_routes = self.options.max_routes if max_routes is None else max_routes
        if max_routes < 1:
            raise InvalidInput(f"max_routes must be >= 1, got {max_routes}")
        src = self.catalog.get_well(source_well_id)
        dst = self.catalog.get_well(destination_well_id)
        if src is None or dst is None:
            return []
        self._require_location(src, dst)

        routes = [self._finish(Route(src, dst, name="Direct Route"))]
        for via in self.find_intermediate_wells(src, dst)[:max_routes - 1]:
            r = Route(src, dst, name=f"Route via {via.name}")
            r.add_waypoint(via.location)
            routes.append(self._finish(r))

        # stable: the direct route stays first on ties
        return sorted(routes, key=lambda r: r.total_distance)

    def find_intermediate_wells(self, source: Well, destination: Well,
                                max_distance: Optional[float] = None) -> List[Well]:
        """
        Wells W worth a detour between source and destination:
          d(s,W) <= max, d(W,d) <= max, d(s,W) + d(W,d) <= ratio * d(s,d).
        Ordered by the extra distance they add.
        """
        if source.location is None or destination.location is None:
            return []
        max_distance = self.options.max_intermediate_distance_km if max_distance is None else max_distance
        direct = haversine_km(source.location, destination.location)
        if direct == 0:
            return []

        scored = []
        for w in self.catalog.all_wells():
            if w.id in (source.id, destination.id) or w.location is None:
                continue
            to_src = haversine_km(source.location, w.location)
            to_dst = haversine_km(w.location, destination.location)
            via = to_src + to_dst
            if via <= direct * self.options.detour_ratio and to_src <= max_distance and to_dst <= max_distance:
                scored.append((via - direct, w))

        scored.sort(key=lambda t: t[0])
        return [w for _, w in scored]

    # -------------------- multi-stop --------------------

    def find_nearest_well(self, reference: Well, candidates: Sequence[Well]) -> Optional[Well]:
        if reference.location is None:
            return None
        located = [w for w in candidates if w.location is not None]
        if not located:
            return None
        return min(located, key=lambda w: haversine_km(reference.location, w.location))

    def find_optimal_multi_well_route(self, well_ids: Sequence[str], start_well_id: str,
                                      end_well_id: Optional[str] = None) -> Optional[Route]:
        """
        Visit every well in `well_ids` using the nearest-neighbour heuristic.

        Greedy ordering: from the current well always go to the closest
        unvisited one. It is an approximation and can be noticeably longer
        than the optimal tour. Without `end_well_id` the route returns to the
        start (round trip).
        Wells without a location are skipped; start and end must have one.
        """
        if not well_ids or len(set(well_ids)) < 2:
            raise InvalidInput("multi-well route needs at least 2 distinct wells")

        wells: List[Well] = []
        for wid in dict.fromkeys(well_ids):
            w = self.catalog.get_well(wid)
            if w is not None:
                wells.append(w)
        if len(wells) < 2:
            return None

        start = self.catalog.get_well(start_well_id)
        if start is None:
            return None
        end = self.catalog.get_well(end_well_id) if end_well_id is not None else start
        if end is None:
            return None
        self._require_location(start, end)

        route = Route(start, end, name="Multi-well Route")
        unvisited = [w for w in wells if w.id not in (start.id, end.id)]
        current = start
        while unvisited:
            nearest = self.find_nearest_well(current, unvisited)
            if nearest is None:
                break
            route.add_waypoint(nearest.location)
            unvisited.remove(nearest)
            current = nearest

        self._finish(route)
        logger.debug("multi-well route over %d wells: %.3f km", len(wells), route.total_distance)
        return route

    # -------------------- field geometry --------------------

    def field_boundary(self, field: Field) -> List[GeoPoint]:
        return convex_hull([w.location for w in field.located_wells()])

    def field_perimeter(self, field: Field) -> float:
        return hull_perimeter_km(self.field_boundary(field))

    def field_area(self, field: Field) -> float:
        return hull_area_km2(self.field_boundary(field))

    def field_routing_statistics(self, field_id: str) -> Optional[FieldRoutingStatistics]:
        field = self.catalog.get_field(field_id)
        if field is None or len(field.wells) < 2:
            return None

        located = field.located_wells()
        d = np.asarray([haversine_km(a.location, b.location)
                        for i, a in enumerate(located) for b in located[i + 1:]], dtype=float)
        return FieldRoutingStatistics(
            total_possible_routes=int(d.size),
            average_well_distance=float(np.mean(d)) if d.size else 0.0,
            min_well_distance=float(np.min(d)) if d.size else 0.0,
            max_well_distance=float(np.max(d)) if d.size else 0.0,
            total_field_perimeter=self.field_perimeter(field),
            field_area=self.field_area(field),
        )

    # -------------------- maintenance --------------------

    def recompute_routes(self, tol_km: float = 1e-9) -> int:
        """Refresh cached metrics of every catalog route; returns how many changed."""
        changed = 0
        for r in self.catalog.routes:
            if not r.is_located():
                logger.warning("skipping route %s: endpoint has no location", r.name)
                continue
            before = r.total_distance
            r.recompute(self.options.average_speed_kmh)
            if before is None or abs(before - r.total_distance) > tol_km:
                changed += 1
        return changed
