from __future__ import annotations
from flask import Blueprint, request
from pydantic import ValidationError

from app.schemas import MultiWellPayload, PairPayload, RouteRequestPayload
from app.services.route_request_service import handle_route_request, parse_route_message
from app.utils import bad, ok, viewer
from fieldroute.serialization import route_record

bp = Blueprint("routing", __name__, url_prefix="/routes")

def _payload(model):
    data = request.get_json(force=True, silent=True)
    if data is None:
        return None, bad("Invalid JSON body")
    try:
        return model.model_validate(data), None
    except ValidationError as e:
        return None, bad(str(e))

def _wells_404(ctx, *ids):
    missing = [i for i in ids if ctx.catalog.get_well(i) is None]
    return bad(f"Well(s) not found: {', '.join(missing)}", 404) if missing else None

# -------------------- listing --------------------

@bp.get("")
def list_routes():
    ctx = viewer()
    with ctx.lock:
        return ok([route_record(r) for r in ctx.catalog.routes])

@bp.delete("")
def clear_routes():
    ctx = viewer()
    with ctx.lock:
        return ok({"cleared": ctx.catalog.clear_routes()})

@bp.post("/recompute")
def recompute():
    ctx = viewer()
    with ctx.lock:
        return ok({"changed": ctx.engine.recompute_routes()})

# -------------------- route request channel --------------------

@bp.post("/request")
def route_request():
    payload, err = _payload(RouteRequestPayload)
    if err:
        return err

    if payload.source_well_name and payload.destination_well_name:
        src, dst, kind = payload.source_well_name, payload.destination_well_name, payload.route_type
    else:
        src, dst, kind = parse_route_message(payload.message)

    ctx = viewer()
    with ctx.lock:
        route = handle_route_request(ctx, src, dst, kind)
        return ok(route_record(route), 201)

# -------------------- queries --------------------

@bp.post("/shortest")
def shortest():
    payload, err = _payload(PairPayload)
    if err:
        return err
    ctx = viewer()
    with ctx.lock:
        err = _wells_404(ctx, payload.source_well_id, payload.destination_well_id)
        if err:
            return err
        route = ctx.engine.find_shortest_route(
            payload.source_well_id, payload.destination_well_id, payload.include_waypoints
        )
        if payload.save:
            ctx.catalog.add_route(route)
        return ok(route_record(route))

@bp.post("/alternatives")
def alternatives():
    payload, err = _payload(PairPayload)
    if err:
        return err
    ctx = viewer()
    with ctx.lock:
        err = _wells_404(ctx, payload.source_well_id, payload.destination_well_id)
        if err:
            return err
        routes = ctx.engine.find_all_routes(
            payload.source_well_id, payload.destination_well_id, payload.max_routes
        )
        return ok([route_record(r) for r in routes])

@bp.post("/multi-well")
def multi_well():
    payload, err = _payload(MultiWellPayload)
    if err:
        return err
    ctx = viewer()
    with ctx.lock:
        route = ctx.engine.find_optimal_multi_well_route(
            payload.well_ids, payload.start_well_id, payload.end_well_id
        )
        if route is None:
            return bad("Wells not found", 404)
        if payload.save:
            ctx.catalog.add_route(route)
        return ok(route_record(route))
