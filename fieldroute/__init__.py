from .errors import AmbiguousName, FieldRouteError, InvalidInput, NotFound
from .geo import GeoPoint, haversine_km, path_length_km
from .models import Field, FlowStation, Route, Well
from .catalog import CatalogStatistics, SpatialCatalog
from .hull import convex_hull, hull_area_km2, hull_perimeter_km
from .context import RoutingOptions, ViewerContext
from .routing import FieldRoutingStatistics, RoutingEngine
from .serialization import catalog_from_snapshot, catalog_snapshot, route_record
