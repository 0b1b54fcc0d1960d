from __future__ import annotations
from flask import current_app, jsonify

from fieldroute.context import ViewerContext

EXT_KEY = "fieldroute"


def viewer() -> ViewerContext:
    return current_app.extensions[EXT_KEY]


def ok(data, code: int = 200):
    return jsonify({"ok": True, "data": data}), code


def bad(message: str, code: int = 400):
    return jsonify({"ok": False, "error": {"code": code, "message": message}}), code
