# fieldroute/hull.py
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

import numpy as np
import shapely
from pyproj import Transformer
from shapely.geometry import Polygon

from .geo import GeoPoint, haversine_km

BBox = Tuple[float, float, float, float]  # (min_lat, min_lng, max_lat, max_lng)


def _cross(o: GeoPoint, a: GeoPoint, b: GeoPoint) -> float:
    # planar (x=lng, y=lat); > 0 means o->a->b turns counter-clockwise
    return ((a.longitude - o.longitude) * (b.latitude - o.latitude) -
            (a.latitude - o.latitude) * (b.longitude - o.longitude))


def convex_hull(points: Sequence[GeoPoint]) -> List[GeoPoint]:
    """
    Andrew's monotone chain over (lng, lat) treated as planar coordinates.

    Returns hull vertices counter-clockwise, starting from the lowest
    (lng, lat) vertex, without repeating the first vertex. Collinear boundary
    points are dropped. With fewer than 3 distinct points there is no polygon
    and the input is returned unchanged.
    """
    if not is_polygon(points):
        return list(points)

    pts = sorted(points, key=lambda p: (p.longitude, p.latitude))

    lower: List[GeoPoint] = []
    for p in pts:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: List[GeoPoint] = []
    for p in reversed(pts):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # last point of each chain is the first point of the other
    return lower[:-1] + upper[:-1]


def is_polygon(points: Sequence[GeoPoint]) -> bool:
    """At least 3 distinct vertices; repeated points do not count."""
    return len({p.lnglat for p in points}) >= 3


def hull_perimeter_km(hull: Sequence[GeoPoint]) -> float:
    if not is_polygon(hull):
        return 0.0
    ring = list(hull) + [hull[0]]
    return sum(haversine_km(p, q) for p, q in zip(ring, ring[1:]))


def _local_equal_area(lat0: float, lng0: float):
    crs = f"+proj=laea +lat_0={lat0} +lon_0={lng0} +datum=WGS84 +units=m +no_defs"
    tf = Transformer.from_crs("EPSG:4326", crs, always_xy=True)
    # shapely hands over an (N, 2) array of (lng, lat)
    return lambda xy: np.column_stack(tf.transform(xy[:, 0], xy[:, 1]))


def hull_area_km2(hull: Sequence[GeoPoint]) -> float:
    """Area of the hull polygon in km², projected around its own centroid."""
    if not is_polygon(hull):
        return 0.0
    poly_ll = Polygon([p.lnglat for p in hull])
    if poly_ll.area <= 0:
        return 0.0
    c = poly_ll.centroid
    poly_m = shapely.transform(poly_ll, _local_equal_area(c.y, c.x))
    return float(poly_m.area) / 1e6


def hull_contains(hull: Sequence[GeoPoint], point: GeoPoint) -> bool:
    """True when point lies inside or on the boundary of the hull polygon."""
    if not is_polygon(hull):
        return any((h.longitude, h.latitude) == (point.longitude, point.latitude) for h in hull)
    ring = list(hull) + [hull[0]]
    return all(_cross(a, b, point) >= -1e-12 for a, b in zip(ring, ring[1:]))


def bounding_box(points: Sequence[GeoPoint]) -> Optional[BBox]:
    if not points:
        return None
    lats = [p.latitude for p in points]
    lngs = [p.longitude for p in points]
    return (min(lats), min(lngs), max(lats), max(lngs))
