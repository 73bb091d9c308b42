from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..utils.codes import normalize_room_code

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    registry = current_app.extensions["rps_registry"]
    room = registry.get_room(normalize_room_code(code))
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(registry.room_public_state(room))
