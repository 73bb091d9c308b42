from __future__ import annotations

import logging

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.rules import parse_choice
from ..game.service import JoinError, RoomRegistry
from ..utils.codes import normalize_room_code
from .countdown import CountdownScheduler

logger = logging.getLogger(__name__)

ERROR_MESSAGES: dict[JoinError, str] = {
    JoinError.NOT_FOUND: "房間不存在",
    JoinError.FULL: "房間已滿",
    JoinError.NAME_TAKEN: "暱稱已被使用",
}


def _clean_name(raw: object, max_length: int = 16) -> str | None:
    n = str(raw or "").strip()
    if not n or len(n) > max_length:
        return None
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return None
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return None
    return n


def register_socketio_handlers(
    socketio: SocketIO,
    registry: RoomRegistry,
    scheduler: CountdownScheduler,
    max_name_length: int = 16,
) -> None:
    def _depart(sid: str, drop) -> None:
        code, room = drop(sid)
        if code is None:
            return
        leave_room(code, sid=sid)
        if room is None:
            return
        socketio.emit(
            "playerLeft",
            {"players": registry.players_payload(room)},
            to=code,
            skip_sid=sid,
        )

    @socketio.on("connect")
    def on_connect(auth=None):
        logger.info("client connected: %s", request.sid)

    @socketio.on("createRoom")
    def create_room(data):
        payload = data if isinstance(data, dict) else {}
        name = _clean_name(payload.get("playerName"), max_name_length)
        if name is None:
            return

        if registry.room_of(request.sid) is not None:
            _depart(request.sid, registry.leave)

        room = registry.create_room(request.sid, name)
        join_room(room.code)
        emit("roomCreated", {"roomId": room.code, "players": registry.players_payload(room)})

    @socketio.on("joinRoom")
    def join(data):
        payload = data if isinstance(data, dict) else {}
        code = normalize_room_code(payload.get("roomId"))
        name = _clean_name(payload.get("playerName"), max_name_length)
        if not code or name is None:
            return

        current = registry.room_of(request.sid)
        if current is not None and current.code == code:
            return

        # A refused join keeps the player seated where they are.
        error = registry.check_join(code, name)
        if error is None:
            if current is not None:
                _depart(request.sid, registry.leave)
            room, error = registry.join_room(request.sid, code, name)
        if error is not None:
            emit("error", {"message": ERROR_MESSAGES[error]})
            return

        join_room(code)
        players = registry.players_payload(room)
        socketio.emit("roomJoined", {"roomId": code, "players": players}, to=code)
        if room.is_full():
            socketio.emit("gameReady", {"players": players}, to=code)

    @socketio.on("makeChoice")
    def make_choice(data):
        payload = data if isinstance(data, dict) else {}
        choice = parse_choice(payload.get("choice"))
        if choice is None:
            return

        room, countdown_id = registry.submit_choice(request.sid, choice)
        if room is None:
            return

        code = room.code
        socketio.emit("playerReady", {"players": registry.players_payload(room)}, to=code)
        if countdown_id is not None:
            scheduler.start(code, countdown_id)

    @socketio.on("playAgain")
    def play_again(data=None):
        room = registry.request_rematch(request.sid)
        if room is None:
            return
        socketio.emit("gameReady", {"players": registry.players_payload(room)}, to=room.code)

    @socketio.on("leaveRoom")
    def leave(data=None):
        _depart(request.sid, registry.leave)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        _depart(request.sid, registry.disconnect)
        logger.info("client disconnected: %s", request.sid)
