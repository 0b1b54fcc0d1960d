# fieldroute/models.py
from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Union
import uuid

from .errors import InvalidInput
from .geo import GeoPoint, haversine_km, path_length_km
from .hull import BBox, bounding_box

# open-ended annotations; closed set of value kinds instead of an untyped bag
MetaValue = Union[str, bool, int, float, date, datetime]
Metadata = Dict[str, MetaValue]


def new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _same(a: Optional[str], b: str) -> bool:
    return a is not None and a.casefold() == b.casefold()


def travel_minutes(distance_km: float, average_speed_kmh: float) -> float:
    if distance_km <= 0 or average_speed_kmh <= 0:
        return 0.0
    return distance_km / average_speed_kmh * 60.0


# =========================
# Well / FlowStation
# =========================
@dataclass(eq=False)
class Well:
    name: str
    type: str = ""
    depth: float = 0.0
    location: Optional[GeoPoint] = None
    status: Optional[str] = None
    production_rate: Optional[float] = None
    completion_date: Optional[date] = None
    operator: Optional[str] = None
    configuration: str = "Vertical"
    production_history: Dict[date, float] = dc_field(default_factory=dict)
    trajectory: List[GeoPoint] = dc_field(default_factory=list)
    formation: Optional[str] = None
    block: Optional[str] = None
    geologic_description: Optional[str] = None
    flow_station_id: Optional[str] = None
    flow_station_name: Optional[str] = None
    metadata: Metadata = dc_field(default_factory=dict)
    id: str = dc_field(default_factory=new_id)

    @classmethod
    def create(cls, name: str, well_type: str, depth: float,
               latitude: float, longitude: float, **extra) -> "Well":
        return cls(name=name, type=well_type, depth=depth,
                   location=GeoPoint(latitude, longitude), **extra)

    def is_active(self) -> bool:
        return _same(self.status, "Active")

    def distance_to(self, other: "Well") -> float:
        if self.location is None or other.location is None:
            raise InvalidInput(f"distance needs both locations: '{self.name}' -> '{other.name}'")
        return haversine_km(self.location, other.location)

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


@dataclass(eq=False)
class FlowStation:
    name: str
    location: Optional[GeoPoint] = None
    id: str = dc_field(default_factory=new_id)

    @classmethod
    def create(cls, name: str, latitude: float, longitude: float) -> "FlowStation":
        return cls(name=name, location=GeoPoint(latitude, longitude))


# =========================
# Field
# =========================
@dataclass(eq=False)
class Field:
    name: str
    location: Optional[GeoPoint] = None
    operator: Optional[str] = None
    discovery_date: Optional[date] = None
    status: Optional[str] = None
    estimated_reserves: Optional[float] = None
    color: Optional[str] = None
    formation: Optional[str] = None
    block: Optional[str] = None
    geologic_description: Optional[str] = None
    boe_conversion_ratio: float = 1.0
    wells: List[Well] = dc_field(default_factory=list)
    metadata: Metadata = dc_field(default_factory=dict)
    id: str = dc_field(default_factory=new_id)

    @classmethod
    def create(cls, name: str, latitude: float, longitude: float, **extra) -> "Field":
        return cls(name=name, location=GeoPoint(latitude, longitude), **extra)

    def add_well(self, well: Well) -> None:
        if self.get_well(well.id) is None:
            self.wells.append(well)

    def remove_well(self, well_id: str) -> bool:
        well = self.get_well(well_id)
        if well is None:
            return False
        self.wells.remove(well)
        return True

    def get_well(self, well_id: str) -> Optional[Well]:
        return next((w for w in self.wells if w.id == well_id), None)

    def wells_by_type(self, well_type: str) -> List[Well]:
        return [w for w in self.wells if _same(w.type, well_type)]

    def active_wells(self) -> List[Well]:
        return [w for w in self.wells if w.is_active()]

    def located_wells(self) -> List[Well]:
        return [w for w in self.wells if w.location is not None]

    def total_production_rate(self) -> Optional[float]:
        """Sum of known rates over active wells; None when nothing is active."""
        active = self.active_wells()
        if not active:
            return None
        return float(sum(w.production_rate for w in active if w.production_rate is not None))

    def bounding_box(self) -> Optional[BBox]:
        return bounding_box([w.location for w in self.located_wells()])

    def __str__(self) -> str:
        return f"{self.name} ({len(self.wells)} wells)"


# =========================
# Route
# =========================
@dataclass(eq=False)
class Route:
    """
    Path between two wells, direct or through intermediate waypoints.

    total_distance / estimated_time are cached when the route is computed and
    are not refreshed when the wells move later; use `is_stale()` and
    `recompute()` to detect and fix that.
    """
    source_well: Well
    destination_well: Well
    name: Optional[str] = None
    waypoints: List[GeoPoint] = dc_field(default_factory=list)
    total_distance: Optional[float] = None   # km
    estimated_time: Optional[float] = None   # minutes
    route_type: Optional[str] = None
    calculated_at: datetime = dc_field(default_factory=_utcnow)
    instructions: Optional[str] = None
    metadata: Metadata = dc_field(default_factory=dict)
    id: str = dc_field(default_factory=new_id)

    def __post_init__(self):
        if self.name is None:
            self.name = f"Route from {self.source_well.name} to {self.destination_well.name}"

    def add_waypoint(self, point: GeoPoint) -> None:
        self.waypoints.append(point)

    def all_points(self) -> List[GeoPoint]:
        pts: List[GeoPoint] = []
        if self.source_well.location is not None:
            pts.append(self.source_well.location)
        pts.extend(self.waypoints)
        if self.destination_well.location is not None:
            pts.append(self.destination_well.location)
        return pts

    def is_located(self) -> bool:
        return self.source_well.location is not None and self.destination_well.location is not None

    def _require_located(self) -> None:
        if not self.is_located():
            raise InvalidInput(f"route '{self.name}' has an endpoint without a location")

    def straight_line_distance(self) -> float:
        return self.source_well.distance_to(self.destination_well)

    def waypoint_distance(self) -> float:
        self._require_located()
        return path_length_km(self.all_points())

    def is_stale(self, tol_km: float = 1e-9) -> bool:
        if self.total_distance is None:
            return False
        if not self.is_located():
            return True
        return abs(self.total_distance - self.waypoint_distance()) > tol_km

    def recompute(self, average_speed_kmh: float) -> "Route":
        self.total_distance = self.waypoint_distance()
        self.estimated_time = travel_minutes(self.total_distance, average_speed_kmh)
        self.calculated_at = _utcnow()
        return self

    def involves(self, well_ids) -> bool:
        return self.source_well.id in well_ids or self.destination_well.id in well_ids

    def __str__(self) -> str:
        if self.total_distance is None:
            return self.name
        return f"{self.name} ({self.total_distance:.2f} km)"
