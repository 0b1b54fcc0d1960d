from __future__ import annotations
from flask import Blueprint, request
from pydantic import ValidationError

from app.utils import bad, ok, viewer
from fieldroute.serialization import catalog_from_snapshot, catalog_snapshot, route_record

bp = Blueprint("catalog", __name__)

# -------------------- snapshot --------------------

@bp.get("/catalog")
def snapshot():
    ctx = viewer()
    with ctx.lock:
        return ok(catalog_snapshot(ctx.catalog))

@bp.post("/catalog/import")
def import_catalog():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return bad("Invalid JSON")
    try:
        catalog = catalog_from_snapshot(data)
    except ValidationError as e:
        return bad(str(e))
    ctx = viewer()
    with ctx.lock:
        ctx.replace_catalog(catalog)
        return ok(ctx.catalog.statistics().as_dict(), 201)

@bp.get("/statistics")
def statistics():
    ctx = viewer()
    with ctx.lock:
        return ok(ctx.catalog.statistics().as_dict())

# -------------------- per field --------------------

def _field_or_404(ctx, field_id):
    field = ctx.catalog.get_field(field_id)
    if field is None:
        return None, bad(f"Field '{field_id}' not found", 404)
    return field, None

@bp.get("/fields/<field_id>/routing-statistics")
def field_routing_statistics(field_id: str):
    ctx = viewer()
    with ctx.lock:
        _, err = _field_or_404(ctx, field_id)
        if err:
            return err
        stats = ctx.engine.field_routing_statistics(field_id)
        # fewer than two wells: empty result, not an error
        return ok(stats.as_dict() if stats is not None else {})

@bp.get("/fields/<field_id>/routes")
def field_routes(field_id: str):
    ctx = viewer()
    with ctx.lock:
        _, err = _field_or_404(ctx, field_id)
        if err:
            return err
        return ok([route_record(r) for r in ctx.catalog.routes_for_field(field_id)])

@bp.get("/fields/<field_id>/boundary")
def field_boundary(field_id: str):
    ctx = viewer()
    with ctx.lock:
        field, err = _field_or_404(ctx, field_id)
        if err:
            return err
        hull = ctx.engine.field_boundary(field)
        return ok({
            "polygon": [{"lat": p.latitude, "lng": p.longitude} for p in hull] if len(hull) >= 3 else [],
            "perimeter_km": ctx.engine.field_perimeter(field),
            "area_km2": ctx.engine.field_area(field),
        })
