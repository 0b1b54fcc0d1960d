# fieldroute/geo.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
import math

from .errors import InvalidInput

R_EARTH_KM = 6371.0

LngLat = Tuple[float, float]


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude in decimal degrees, optional elevation in metres."""
    latitude: float
    longitude: float
    elevation: Optional[float] = None

    def __post_init__(self):
        lat, lng = self.latitude, self.longitude
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidInput(f"non-finite coordinate: ({lat}, {lng})")
        if not -90.0 <= lat <= 90.0:
            raise InvalidInput(f"latitude out of range [-90, 90]: {lat}")
        if not -180.0 <= lng <= 180.0:
            raise InvalidInput(f"longitude out of range [-180, 180]: {lng}")

    @property
    def lnglat(self) -> LngLat:
        return (self.longitude, self.latitude)

    def distance_to(self, other: "GeoPoint") -> float:
        return haversine_km(self, other)

    def __str__(self) -> str:
        return f"Lat: {self.latitude:.6f}, Lng: {self.longitude:.6f}"


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in kilometres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    # float noise can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return 2 * R_EARTH_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def path_length_km(points: Iterable[GeoPoint]) -> float:
    pts = list(points)
    if len(pts) < 2:
        return 0.0
    return sum(haversine_km(p, q) for p, q in zip(pts, pts[1:]))
