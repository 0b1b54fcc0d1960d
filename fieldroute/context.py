# fieldroute/context.py
from __future__ import annotations
from dataclasses import dataclass, field
from threading import RLock
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from .catalog import SpatialCatalog

if TYPE_CHECKING:
    from .routing import RoutingEngine


# ===== Routing defaults (validated) =====
class RoutingOptions(BaseModel):
    average_speed_kmh: float = Field(default=60.0, gt=0)
    max_intermediate_distance_km: float = Field(default=50.0, gt=0)
    detour_ratio: float = Field(default=1.5, ge=1.0)
    max_routes: int = Field(default=5, ge=1)
    route_type: str = Field(default="Driving")


# ===== Explicit dependency bundle for the HTTP layer =====
@dataclass
class ViewerContext:
    catalog: SpatialCatalog
    engine: "RoutingEngine"
    options: RoutingOptions
    # single-writer lock; the core itself does no locking
    lock: RLock = field(default_factory=RLock)

    @classmethod
    def build(cls, catalog: Optional[SpatialCatalog] = None,
              options: Optional[RoutingOptions] = None) -> "ViewerContext":
        from .routing import RoutingEngine

        catalog = catalog if catalog is not None else SpatialCatalog()
        options = options or RoutingOptions()
        return cls(catalog=catalog, engine=RoutingEngine(catalog, options), options=options)

    def replace_catalog(self, catalog: SpatialCatalog) -> None:
        from .routing import RoutingEngine

        self.catalog = catalog
        self.engine = RoutingEngine(catalog, self.options)
