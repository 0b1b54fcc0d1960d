from __future__ import annotations
from datetime import date
import math

import pytest

from app import create_app
from fieldroute.catalog import SpatialCatalog
from fieldroute.geo import GeoPoint
from fieldroute.models import Field, FlowStation, Well
from fieldroute.routing import RoutingEngine


def km_to_deg(km: float) -> float:
    """Degrees of longitude along the equator covering `km` on the 6371 km sphere."""
    return math.degrees(km / 6371.0)


@pytest.fixture
def niger_delta() -> SpatialCatalog:
    catalog = SpatialCatalog(concession_boundary=[
        GeoPoint(5.3, 6.8), GeoPoint(5.3, 7.4), GeoPoint(6.0, 7.4), GeoPoint(6.0, 6.8),
    ])
    fs = FlowStation.create("FS-Alpha", 5.47, 6.99)
    catalog.add_flow_station(fs)

    field_a = Field.create("Niger Delta Field A", 5.5, 7.0, operator="Shell Nigeria", status="Active",
                           discovery_date=date(1990, 5, 15), estimated_reserves=500_000_000,
                           color="#e6194b", formation="Agbada Formation", block="1-AB1")
    field_a.add_well(Well.create("Well-A-01", "Oil", 2500, 5.45, 6.95, status="Active",
                                 production_rate=1500, completion_date=date(1992, 3, 10),
                                 operator="Shell Nigeria", flow_station_id=fs.id,
                                 flow_station_name=fs.name,
                                 production_history={date(1992, 3, 10): 1500.0},
                                 trajectory=[GeoPoint(5.45, 6.95), GeoPoint(5.451, 6.951)]))
    field_a.add_well(Well.create("Well-A-02", "Gas", 2800, 5.52, 7.02, status="Active",
                                 production_rate=25, flow_station_id=fs.id))
    field_a.add_well(Well.create("Well-A-03", "Oil", 2200, 5.48, 7.05, status="Inactive",
                                 production_rate=0))

    field_b = Field.create("Niger Delta Field B", 5.8, 7.2, operator="ExxonMobil", status="Active",
                           color="#3cb44b", formation="Akata Formation", block="E1000")
    field_b.add_well(Well.create("Well-B-01", "Oil", 3000, 5.75, 7.15, status="Active", production_rate=2200))
    field_b.add_well(Well.create("Well-B-02", "Gas", 3200, 5.82, 7.25, status="Active", production_rate=35))
    field_b.add_well(Well.create("Well-B-03", "Water", 1800, 5.78, 7.18, status="Active", production_rate=500))

    catalog.add_field(field_a)
    catalog.add_field(field_b)
    return catalog


@pytest.fixture
def equator_line() -> SpatialCatalog:
    """
    S and D 0.4 deg apart on the equator, M1/M2 slightly off the line between
    them, F far north (too big a detour).
    """
    catalog = SpatialCatalog()
    f = Field.create("Equator", 0.0, 0.2)
    for name, lat, lng in [("S", 0.0, 0.0), ("D", 0.0, 0.4), ("M1", 0.02, 0.2),
                           ("M2", 0.1, 0.2), ("F", 1.0, 0.2)]:
        f.add_well(Well.create(name, "Oil", 1000, lat, lng, status="Active"))
    catalog.add_field(f)
    return catalog


def well(catalog: SpatialCatalog, name: str) -> Well:
    return catalog.get_well_by_name(name)


@pytest.fixture
def engine(niger_delta) -> RoutingEngine:
    return RoutingEngine(niger_delta)


@pytest.fixture
def client(niger_delta):
    app = create_app(catalog=niger_delta)
    app.config["TESTING"] = True
    return app.test_client()
