from __future__ import annotations
import json
import logging
from typing import Optional

from flask import Flask

from config import SETTINGS
from fieldroute.catalog import SpatialCatalog
from fieldroute.context import RoutingOptions, ViewerContext
from fieldroute.errors import AmbiguousName, FieldRouteError, InvalidInput, NotFound
from fieldroute.serialization import catalog_from_snapshot

logger = logging.getLogger(__name__)

def _initial_catalog(settings) -> SpatialCatalog:
    path = settings.SNAPSHOT_PATH
    if not path.exists():
        return SpatialCatalog()
    with open(path, "r", encoding="utf-8") as f:
        catalog = catalog_from_snapshot(json.load(f))
    logger.info("loaded catalog snapshot %s (%d fields)", path.name, len(catalog.fields))
    return catalog

def create_app(catalog: Optional[SpatialCatalog] = None,
               options: Optional[RoutingOptions] = None,
               settings=SETTINGS):
    app = Flask(__name__)

    if catalog is None:
        catalog = _initial_catalog(settings)
    options = options or RoutingOptions(**settings.DEFAULTS)
    # no module-level state: views reach the catalog through app.extensions
    from app.utils import EXT_KEY, bad
    app.extensions[EXT_KEY] = ViewerContext.build(catalog, options)

    from app.routes.health import bp as bp_health
    from app.routes.catalog import bp as bp_catalog
    from app.routes.routing import bp as bp_routing
    app.register_blueprint(bp_health)
    app.register_blueprint(bp_catalog)
    app.register_blueprint(bp_routing)

    @app.errorhandler(FieldRouteError)
    def core_error(e: FieldRouteError):
        if isinstance(e, NotFound):
            return bad(str(e), 404)
        if isinstance(e, AmbiguousName):
            return bad(str(e), 409)
        if isinstance(e, InvalidInput):
            return bad(str(e), 422)
        return bad(str(e), 500)

    @app.route("/")
    def home():
        return {"message": "fieldroute API running"}, 200

    return app
