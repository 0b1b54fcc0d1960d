# fieldroute/serialization.py
"""
Transport records for the map UI and exporters.

Snapshot shape (camelCase, None-valued keys omitted):

    {
      "concessionBoundary": [{"lat": .., "lng": ..}, ...],
      "fields": [{"id", "name", "location", ..., "wells": [{...}], "metadata"}],
      "flowStations": [{"id", "name", "location"}],
      "routes": [{"id", "name", "sourceWellId", ..., "path": [...]}]
    }

Consumers should tolerate extra or missing optional keys; reading ignores
unknown keys.
Metadata strings in ISO date or datetime form are read back as date or
datetime values.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Optional
import logging
import re

from pydantic import AfterValidator, BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .catalog import SpatialCatalog
from .geo import GeoPoint
from .models import Field, FlowStation, MetaValue, Route, Well

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_ISO_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")
_AS_DATE = TypeAdapter(date)
_AS_DATETIME = TypeAdapter(datetime)


def _parse_or_keep(adapter: TypeAdapter, text: str) -> MetaValue:
    try:
        return adapter.validate_python(text)
    except ValidationError:
        return text


def _restore_dates(values: Dict[str, MetaValue]) -> Dict[str, MetaValue]:
    # dates are written as ISO strings; read them back as dates
    out: Dict[str, MetaValue] = {}
    for k, v in values.items():
        if isinstance(v, str):
            if _ISO_DATE.fullmatch(v):
                v = _parse_or_keep(_AS_DATE, v)
            elif _ISO_DATETIME.match(v):
                v = _parse_or_keep(_AS_DATETIME, v)
        out[k] = v
    return out


MetaRecord = Annotated[Dict[str, MetaValue], AfterValidator(_restore_dates)]


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LatLng(_Record):
    lat: float
    lng: float


class WellRecord(_Record):
    id: Optional[str] = None
    name: str
    type: Optional[str] = None
    depth: Optional[float] = None
    location: Optional[LatLng] = None
    status: Optional[str] = None
    completion_date: Optional[date] = None
    production_rate: Optional[float] = None
    operator_name: Optional[str] = None
    configuration: Optional[str] = None
    production_history: Optional[Dict[date, float]] = None
    formation: Optional[str] = None
    block: Optional[str] = None
    geologic_description: Optional[str] = None
    trajectory: Optional[List[LatLng]] = None
    flow_station_id: Optional[str] = None
    flow_station_name: Optional[str] = None
    metadata: Optional[MetaRecord] = None


class FieldRecord(_Record):
    id: Optional[str] = None
    name: str
    location: Optional[LatLng] = None
    operator_name: Optional[str] = None
    discovery_date: Optional[date] = None
    status: Optional[str] = None
    estimated_reserves: Optional[float] = None
    color: Optional[str] = None
    formation: Optional[str] = None
    block: Optional[str] = None
    geologic_description: Optional[str] = None
    boe_conversion_ratio: Optional[float] = None
    wells: List[WellRecord] = []
    metadata: Optional[MetaRecord] = None


class FlowStationRecord(_Record):
    id: Optional[str] = None
    name: str
    location: Optional[LatLng] = None


class RouteRecord(_Record):
    id: Optional[str] = None
    name: Optional[str] = None
    source_well_id: str
    source_well_name: Optional[str] = None
    destination_well_id: str
    destination_well_name: Optional[str] = None
    waypoints: List[LatLng] = []
    path: Optional[List[LatLng]] = None
    total_distance: Optional[float] = None
    estimated_time: Optional[float] = None
    route_type: Optional[str] = None
    calculated_at: Optional[datetime] = None
    instructions: Optional[str] = None
    metadata: Optional[MetaRecord] = None


class CatalogSnapshot(_Record):
    concession_boundary: List[LatLng] = []
    fields: List[FieldRecord] = []
    flow_stations: List[FlowStationRecord] = []
    routes: List[RouteRecord] = []


# ------------------------
# model -> record
# ------------------------
def _ll(p: Optional[GeoPoint]) -> Optional[LatLng]:
    return LatLng(lat=p.latitude, lng=p.longitude) if p is not None else None


def _well_record(w: Well) -> WellRecord:
    return WellRecord(
        id=w.id, name=w.name, type=w.type, depth=w.depth,
        location=_ll(w.location), status=w.status,
        completion_date=w.completion_date, production_rate=w.production_rate,
        operator_name=w.operator, configuration=w.configuration,
        production_history=dict(sorted(w.production_history.items())),
        formation=w.formation, block=w.block, geologic_description=w.geologic_description,
        trajectory=[_ll(p) for p in w.trajectory],
        flow_station_id=w.flow_station_id, flow_station_name=w.flow_station_name,
        metadata=dict(w.metadata),
    )


def _field_record(f: Field) -> FieldRecord:
    return FieldRecord(
        id=f.id, name=f.name, location=_ll(f.location), operator_name=f.operator,
        discovery_date=f.discovery_date, status=f.status,
        estimated_reserves=f.estimated_reserves, color=f.color,
        formation=f.formation, block=f.block, geologic_description=f.geologic_description,
        boe_conversion_ratio=f.boe_conversion_ratio,
        wells=[_well_record(w) for w in f.wells],
        metadata=dict(f.metadata),
    )


def _route_record(r: Route) -> RouteRecord:
    return RouteRecord(
        id=r.id, name=r.name,
        source_well_id=r.source_well.id, source_well_name=r.source_well.name,
        destination_well_id=r.destination_well.id, destination_well_name=r.destination_well.name,
        waypoints=[_ll(p) for p in r.waypoints],
        path=[_ll(p) for p in r.all_points()],
        total_distance=r.total_distance, estimated_time=r.estimated_time,
        route_type=r.route_type, calculated_at=r.calculated_at,
        instructions=r.instructions, metadata=dict(r.metadata),
    )


def route_record(route: Route) -> Dict[str, Any]:
    return _route_record(route).dump()


def catalog_snapshot(catalog: SpatialCatalog) -> Dict[str, Any]:
    snap = CatalogSnapshot(
        concession_boundary=[_ll(p) for p in catalog.concession_boundary],
        fields=[_field_record(f) for f in catalog.fields],
        flow_stations=[FlowStationRecord(id=s.id, name=s.name, location=_ll(s.location))
                       for s in catalog.flow_stations],
        routes=[_route_record(r) for r in catalog.routes],
    )
    return snap.dump()


# ------------------------
# record -> model
# ------------------------
def _gp(ll: Optional[LatLng]) -> Optional[GeoPoint]:
    return GeoPoint(ll.lat, ll.lng) if ll is not None else None


def _ids(rec) -> Dict[str, str]:
    return {"id": rec.id} if rec.id else {}


def _well(rec: WellRecord) -> Well:
    opt = {k: v for k, v in {
        "type": rec.type, "depth": rec.depth, "configuration": rec.configuration,
    }.items() if v is not None}
    return Well(
        name=rec.name, location=_gp(rec.location), status=rec.status,
        production_rate=rec.production_rate, completion_date=rec.completion_date,
        operator=rec.operator_name,
        production_history=dict(rec.production_history or {}),
        trajectory=[_gp(p) for p in rec.trajectory or []],
        formation=rec.formation, block=rec.block, geologic_description=rec.geologic_description,
        flow_station_id=rec.flow_station_id, flow_station_name=rec.flow_station_name,
        metadata=dict(rec.metadata or {}),
        **opt, **_ids(rec),
    )


def _field(rec: FieldRecord) -> Field:
    f = Field(
        name=rec.name, location=_gp(rec.location), operator=rec.operator_name,
        discovery_date=rec.discovery_date, status=rec.status,
        estimated_reserves=rec.estimated_reserves, color=rec.color,
        formation=rec.formation, block=rec.block, geologic_description=rec.geologic_description,
        metadata=dict(rec.metadata or {}),
        **_ids(rec),
    )
    if rec.boe_conversion_ratio is not None:
        f.boe_conversion_ratio = rec.boe_conversion_ratio
    for w in rec.wells:
        f.add_well(_well(w))
    return f


def catalog_from_snapshot(data: Dict[str, Any]) -> SpatialCatalog:
    """Build a catalog from a snapshot-shaped dict. Raises pydantic.ValidationError on bad shape."""
    snap = CatalogSnapshot.model_validate(data)
    catalog = SpatialCatalog(concession_boundary=[_gp(p) for p in snap.concession_boundary])
    for rec in snap.fields:
        catalog.add_field(_field(rec))
    for rec in snap.flow_stations:
        catalog.add_flow_station(FlowStation(name=rec.name, location=_gp(rec.location), **_ids(rec)))

    for rec in snap.routes:
        src = catalog.get_well(rec.source_well_id)
        dst = catalog.get_well(rec.destination_well_id)
        if src is None or dst is None:
            logger.warning("skipping route %s: unknown well id", rec.id or rec.name)
            continue
        r = Route(src, dst, name=rec.name,
                  waypoints=[_gp(p) for p in rec.waypoints],
                  total_distance=rec.total_distance, estimated_time=rec.estimated_time,
                  route_type=rec.route_type, instructions=rec.instructions,
                  metadata=dict(rec.metadata or {}), **_ids(rec))
        if rec.calculated_at is not None:
            r.calculated_at = rec.calculated_at
        catalog.add_route(r)
    return catalog
