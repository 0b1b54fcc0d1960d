from flask import Blueprint, jsonify

from app.utils import viewer

bp = Blueprint("health", __name__, url_prefix="/")

@bp.route("health", methods=["GET"])
def health():
    ctx = viewer()
    with ctx.lock:
        counts = {"fields": len(ctx.catalog.fields), "routes": len(ctx.catalog.routes)}
    return jsonify({"ok": True, "service": "fieldroute", "catalog": counts}), 200
