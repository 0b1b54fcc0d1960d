import pytest

from conftest import km_to_deg, well
from fieldroute.catalog import SpatialCatalog
from fieldroute.context import RoutingOptions
from fieldroute.errors import InvalidInput
from fieldroute.geo import GeoPoint, haversine_km
from fieldroute.models import Field, Well
from fieldroute.routing import RoutingEngine


def _line(*wells):
    """One field of wells on the equator, given as (name, km east of 0 deg)."""
    catalog = SpatialCatalog()
    f = Field.create("Line", 0.0, 0.0)
    for name, km in wells:
        f.add_well(Well.create(name, "Oil", 1000, 0.0, km_to_deg(km)))
    catalog.add_field(f)
    return catalog


def test_engine_needs_a_catalog():
    with pytest.raises(InvalidInput):
        RoutingEngine(None)


# -------------------- point-to-point --------------------

def test_direct_route_is_the_great_circle_distance(engine, niger_delta):
    a1, a2 = well(niger_delta, "Well-A-01"), well(niger_delta, "Well-A-02")
    route = engine.find_shortest_route(a1.id, a2.id)
    assert route.waypoints == []
    assert route.total_distance == haversine_km(a1.location, a2.location)
    assert route.total_distance == pytest.approx(10.98, abs=0.01)
    # 60 km/h: minutes == km
    assert route.estimated_time == pytest.approx(route.total_distance)
    assert route.route_type == "Driving"
    assert route.name == "Route from Well-A-01 to Well-A-02"


def test_shortest_route_does_not_touch_catalog(engine, niger_delta):
    a1, a2 = well(niger_delta, "Well-A-01"), well(niger_delta, "Well-A-02")
    engine.find_shortest_route(a1.id, a2.id)
    assert niger_delta.routes == []


def test_unknown_ids_resolve_to_nothing(engine, niger_delta):
    a1 = well(niger_delta, "Well-A-01")
    assert engine.find_shortest_route(a1.id, "ghost") is None
    assert engine.find_shortest_route("ghost", a1.id) is None
    assert engine.find_all_routes("ghost", a1.id) == []


def test_shortest_route_with_waypoints(equator_line):
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    route = eng.find_shortest_route(s.id, d.id, include_waypoints=True)
    m1, m2 = well(equator_line, "M1"), well(equator_line, "M2")
    assert route.waypoints == [m1.location, m2.location]
    expected = (haversine_km(s.location, m1.location) + haversine_km(m1.location, m2.location)
                + haversine_km(m2.location, d.location))
    assert route.total_distance == pytest.approx(expected)


def test_intermediate_wells_ordered_by_detour(equator_line):
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    names = [w.name for w in eng.find_intermediate_wells(s, d)]
    assert names == ["M1", "M2"]


def test_intermediate_wells_respect_max_distance():
    catalog = _line(("S", 0), ("D", 60), ("W51", 51), ("W49", 49))
    eng = RoutingEngine(catalog)
    s, d = well(catalog, "S"), well(catalog, "D")
    assert [w.name for w in eng.find_intermediate_wells(s, d)] == ["W49"]
    got = {w.name for w in eng.find_intermediate_wells(s, d, max_distance=52)}
    assert got == {"W49", "W51"}


def test_intermediate_wells_respect_detour_ratio(equator_line):
    eng = RoutingEngine(equator_line, RoutingOptions(detour_ratio=1.01))
    s, d = well(equator_line, "S"), well(equator_line, "D")
    assert [w.name for w in eng.find_intermediate_wells(s, d)] == ["M1"]


def test_intermediate_wells_skip_unlocated(equator_line):
    equator_line.fields[0].add_well(Well(name="Ghost"))
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    assert "Ghost" not in [w.name for w in eng.find_intermediate_wells(s, d)]


def test_find_all_routes_sorted_direct_first(equator_line):
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    routes = eng.find_all_routes(s.id, d.id)
    assert [r.name for r in routes] == ["Direct Route", "Route via M1", "Route via M2"]
    dists = [r.total_distance for r in routes]
    assert dists == sorted(dists)
    assert routes[0].total_distance == haversine_km(s.location, d.location)
    assert len(routes[1].waypoints) == 1


def test_find_all_routes_caps_count(equator_line):
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    assert [r.name for r in eng.find_all_routes(s.id, d.id, max_routes=1)] == ["Direct Route"]
    assert len(eng.find_all_routes(s.id, d.id, max_routes=2)) == 2
    with pytest.raises(InvalidInput):
        eng.find_all_routes(s.id, d.id, max_routes=0)


# -------------------- multi-stop --------------------

def test_find_nearest_well(equator_line):
    eng = RoutingEngine(equator_line)
    s = well(equator_line, "S")
    cands = [well(equator_line, n) for n in ("D", "M2", "M1")]
    assert eng.find_nearest_well(s, cands).name == "M1"
    assert eng.find_nearest_well(s, []) is None


def test_multi_well_round_trip(equator_line):
    eng = RoutingEngine(equator_line)
    s, m1, d = (well(equator_line, n) for n in ("S", "M1", "D"))
    route = eng.find_optimal_multi_well_route([s.id, m1.id, d.id], s.id)
    assert route.name == "Multi-well Route"
    assert route.source_well is s and route.destination_well is s
    assert route.waypoints == [m1.location, d.location]
    expected = (haversine_km(s.location, m1.location) + haversine_km(m1.location, d.location)
                + haversine_km(d.location, s.location))
    assert route.total_distance == pytest.approx(expected)


def test_multi_well_with_end(equator_line):
    eng = RoutingEngine(equator_line)
    s, m1, m2, d = (well(equator_line, n) for n in ("S", "M1", "M2", "D"))
    route = eng.find_optimal_multi_well_route([s.id, m2.id, m1.id, d.id], s.id, d.id)
    assert route.destination_well is d
    assert route.waypoints == [m1.location, m2.location]


def test_multi_well_visits_each_well_once(equator_line):
    eng = RoutingEngine(equator_line)
    ids = [w.id for w in equator_line.all_wells()]
    s = well(equator_line, "S")
    route = eng.find_optimal_multi_well_route(ids + ids, s.id)
    assert len(route.waypoints) == len(ids) - 1
    assert len(set(route.waypoints)) == len(route.waypoints)


@pytest.mark.parametrize("ids", [[], ["a"], ["a", "a"]])
def test_multi_well_needs_two_distinct_ids(equator_line, ids):
    eng = RoutingEngine(equator_line)
    with pytest.raises(InvalidInput):
        eng.find_optimal_multi_well_route(ids, "a")


def test_multi_well_unresolved(equator_line):
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    assert eng.find_optimal_multi_well_route(["x", "y"], s.id) is None
    assert eng.find_optimal_multi_well_route([s.id, "y"], s.id) is None
    assert eng.find_optimal_multi_well_route([s.id, d.id], "ghost") is None
    assert eng.find_optimal_multi_well_route([s.id, d.id], s.id, "ghost") is None


# -------------------- field geometry --------------------

def test_field_routing_statistics(engine, niger_delta):
    field_a = niger_delta.fields[0]
    a1, a2, a3 = field_a.wells
    pairs = [a1.distance_to(a2), a1.distance_to(a3), a2.distance_to(a3)]
    stats = engine.field_routing_statistics(field_a.id)
    assert stats.total_possible_routes == 3
    assert stats.min_well_distance == pytest.approx(min(pairs))
    assert stats.max_well_distance == pytest.approx(max(pairs))
    assert stats.average_well_distance == pytest.approx(sum(pairs) / 3)
    # three non-collinear wells: the hull is the triangle itself
    assert stats.total_field_perimeter == pytest.approx(sum(pairs))
    assert stats.field_area > 0


def test_field_routing_statistics_needs_two_wells(engine, niger_delta):
    lonely = Field.create("Lonely", 5.0, 7.0)
    lonely.add_well(Well.create("Solo", "Oil", 1000, 5.0, 7.0))
    niger_delta.add_field(lonely)
    assert engine.field_routing_statistics(lonely.id) is None
    assert engine.field_routing_statistics("unknown") is None


def test_field_boundary_of_collinear_wells_has_no_area():
    catalog = _line(("A", 0), ("B", 10), ("C", 20))
    eng = RoutingEngine(catalog)
    field = catalog.fields[0]
    assert eng.field_area(field) == 0.0
    assert eng.field_perimeter(field) == 0.0
    assert eng.field_routing_statistics(field.id).total_possible_routes == 3


# -------------------- metrics / maintenance --------------------

@pytest.mark.parametrize("distance, speed, minutes", [
    (30.0, None, 30.0),
    (30.0, 30.0, 60.0),
    (0.0, None, 0.0),
    (-5.0, None, 0.0),
    (30.0, 0.0, 0.0),
])
def test_estimate_travel_time(engine, distance, speed, minutes):
    assert engine.estimate_travel_time(distance, speed) == pytest.approx(minutes)


def test_moved_well_makes_route_stale(engine, niger_delta):
    a1, a2 = well(niger_delta, "Well-A-01"), well(niger_delta, "Well-A-02")
    route = niger_delta.add_route(engine.find_shortest_route(a1.id, a2.id))
    assert not route.is_stale()

    a2.location = GeoPoint(5.60, 7.10)
    assert route.is_stale()
    assert engine.recompute_routes() == 1
    assert not route.is_stale()
    assert route.total_distance == haversine_km(a1.location, a2.location)
    assert engine.recompute_routes() == 0


# -------------------- missing locations --------------------

def test_unlocated_endpoints_are_rejected(equator_line):
    ghost = Well(name="Ghost")
    equator_line.fields[0].add_well(ghost)
    eng = RoutingEngine(equator_line)
    s, d = well(equator_line, "S"), well(equator_line, "D")
    with pytest.raises(InvalidInput):
        eng.find_shortest_route(s.id, ghost.id)
    with pytest.raises(InvalidInput):
        eng.find_all_routes(ghost.id, s.id)
    with pytest.raises(InvalidInput):
        eng.find_optimal_multi_well_route([s.id, d.id], ghost.id)


def test_multi_well_skips_unlocated_stops(equator_line):
    ghost = Well(name="Ghost")
    equator_line.fields[0].add_well(ghost)
    eng = RoutingEngine(equator_line)
    s, m1 = well(equator_line, "S"), well(equator_line, "M1")
    route = eng.find_optimal_multi_well_route([s.id, m1.id, ghost.id], s.id)
    assert route.waypoints == [m1.location]


def test_route_losing_a_location_is_stale_but_not_recomputed(engine, niger_delta):
    a1, a2 = well(niger_delta, "Well-A-01"), well(niger_delta, "Well-A-02")
    route = niger_delta.add_route(engine.find_shortest_route(a1.id, a2.id))
    before = route.total_distance

    a2.location = None
    assert route.is_stale()
    assert engine.recompute_routes() == 0
    assert route.total_distance == before
    with pytest.raises(InvalidInput):
        route.recompute(60.0)


def test_wells_sharing_a_location_give_no_field_outline():
    catalog = _line(("A", 0), ("A-twin", 0), ("B", 10))
    eng = RoutingEngine(catalog)
    stats = eng.field_routing_statistics(catalog.fields[0].id)
    assert stats.total_possible_routes == 3
    assert stats.min_well_distance == 0.0
    assert stats.total_field_perimeter == 0.0
    assert stats.field_area == 0.0
