# fieldroute/catalog.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional
import logging

from .errors import AmbiguousName, InvalidInput, NotFound
from .geo import GeoPoint
from .models import Field, FlowStation, Route, Well

logger = logging.getLogger(__name__)


@dataclass
class CatalogStatistics:
    total_fields: int = 0
    total_wells: int = 0
    active_wells: int = 0
    total_routes: int = 0
    total_flow_stations: int = 0
    oil_wells: int = 0
    gas_wells: int = 0
    water_wells: int = 0
    total_production_rate: float = 0.0
    average_well_depth: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def _one_by_name(kind: str, items: list, name: str):
    key = name.casefold()
    hits = [it for it in items if it.name is not None and it.name.casefold() == key]
    if len(hits) > 1:
        raise AmbiguousName(kind, name, len(hits))
    return hits[0] if hits else None


class SpatialCatalog:
    """
    In-memory registry of fields (owning their wells), flow stations and routes.

    Not thread-safe: callers sharing one catalog across threads must serialise
    access themselves (see `ViewerContext.lock`).
    """

    def __init__(self, concession_boundary: Optional[List[GeoPoint]] = None):
        self.fields: List[Field] = []
        self.routes: List[Route] = []
        self.flow_stations: List[FlowStation] = []
        self.concession_boundary: List[GeoPoint] = list(concession_boundary or [])

    # -------------------- fields --------------------

    def add_field(self, field: Field) -> None:
        if self.get_field(field.id) is not None:
            return
        taken = {w.id for w in self.all_wells()}
        clash = [w.id for w in field.wells if w.id in taken]
        if clash:
            raise InvalidInput(f"well ids already in catalog: {', '.join(clash)}")
        if len({w.id for w in field.wells}) != len(field.wells):
            raise InvalidInput(f"duplicate well ids inside field '{field.name}'")
        self.fields.append(field)
        logger.info("field added: %s (%d wells)", field.name, len(field.wells))

    def remove_field(self, field_id: str) -> bool:
        field = self.get_field(field_id)
        if field is None:
            return False
        self.fields.remove(field)
        logger.info("field removed: %s", field.name)
        return True

    def get_field(self, field_id: str) -> Optional[Field]:
        return next((f for f in self.fields if f.id == field_id), None)

    def get_field_by_name(self, name: str) -> Optional[Field]:
        return _one_by_name("field", self.fields, name)

    def field_of_well(self, well_id: str) -> Optional[Field]:
        return next((f for f in self.fields if f.get_well(well_id) is not None), None)

    # -------------------- wells --------------------

    def add_well(self, field_id: str, well: Well) -> Well:
        field = self.get_field(field_id)
        if field is None:
            raise NotFound("field", field_id)
        if self.get_well(well.id) is not None:
            raise InvalidInput(f"well id already in catalog: {well.id}")
        field.add_well(well)
        return well

    def remove_well(self, well_id: str) -> bool:
        field = self.field_of_well(well_id)
        return field.remove_well(well_id) if field is not None else False

    def all_wells(self) -> List[Well]:
        return [w for f in self.fields for w in f.wells]

    def get_well(self, well_id: str) -> Optional[Well]:
        for f in self.fields:
            w = f.get_well(well_id)
            if w is not None:
                return w
        return None

    def get_well_by_name(self, name: str) -> Optional[Well]:
        return _one_by_name("well", self.all_wells(), name)

    # -------------------- flow stations --------------------

    def add_flow_station(self, station: FlowStation) -> None:
        if self.get_flow_station(station.id) is None:
            self.flow_stations.append(station)

    def get_flow_station(self, station_id: str) -> Optional[FlowStation]:
        return next((s for s in self.flow_stations if s.id == station_id), None)

    def wells_for_flow_station(self, station_id: str) -> List[Well]:
        return [w for w in self.all_wells() if w.flow_station_id == station_id]

    # -------------------- routes --------------------

    def create_route(self, source_well_id: str, destination_well_id: str,
                     name: Optional[str] = None) -> Route:
        src = self.get_well(source_well_id)
        dst = self.get_well(destination_well_id)
        missing = [i for i, w in ((source_well_id, src), (destination_well_id, dst)) if w is None]
        if missing:
            raise NotFound("well", ", ".join(missing))
        route = Route(src, dst, name=name)
        self.routes.append(route)
        logger.info("route created: %s", route.name)
        return route

    def add_route(self, route: Route) -> Route:
        if all(r.id != route.id for r in self.routes):
            self.routes.append(route)
        return route

    def get_route(self, route_id: str) -> Optional[Route]:
        return next((r for r in self.routes if r.id == route_id), None)

    def clear_routes(self) -> int:
        n = len(self.routes)
        self.routes.clear()
        return n

    def routes_for_field(self, field_id: str) -> List[Route]:
        field = self.get_field(field_id)
        if field is None:
            return []
        ids = {w.id for w in field.wells}
        return [r for r in self.routes if r.involves(ids)]

    # -------------------- stats --------------------

    def statistics(self) -> CatalogStatistics:
        wells = self.all_wells()
        active = [w for w in wells if w.is_active()]

        def count_type(t: str) -> int:
            return sum(1 for w in wells if w.type and w.type.casefold() == t)

        return CatalogStatistics(
            total_fields=len(self.fields),
            total_wells=len(wells),
            active_wells=len(active),
            total_routes=len(self.routes),
            total_flow_stations=len(self.flow_stations),
            oil_wells=count_type("oil"),
            gas_wells=count_type("gas"),
            water_wells=count_type("water"),
            total_production_rate=float(sum(w.production_rate for w in active
                                            if w.production_rate is not None)),
            average_well_depth=(sum(w.depth for w in wells) / len(wells)) if wells else 0.0,
        )
