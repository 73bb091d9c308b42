from __future__ import annotations

import logging
import uuid
from enum import Enum
from threading import RLock

from ..utils.codes import generate_room_code
from .models import Choice, Player, Room, RoomState, RoundResult
from .rules import resolve

logger = logging.getLogger(__name__)


class JoinError(str, Enum):
    NOT_FOUND = "room_not_found"
    FULL = "room_full"
    NAME_TAKEN = "name_taken"


def player_payload(player: Player, reveal: bool = False) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "ready": player.ready,
        # Opponent choices stay hidden until the result is broadcast.
        "choice": player.choice.value if reveal and player.choice else None,
    }


class RoomRegistry:
    """Owns every room and the connection -> room back-reference.

    All room mutation goes through this object. Both indices are updated
    together under the same lock.
    """

    def __init__(self, code_length: int = 6):
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._player_rooms: dict[str, str] = {}
        self.code_length = code_length

    # Lookups

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def room_of(self, player_id: str) -> Room | None:
        with self._lock:
            code = self._player_rooms.get(player_id)
            if code is None:
                return None
            return self._rooms.get(code)

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def players_payload(self, room: Room, reveal: bool = False) -> list[dict]:
        with self._lock:
            return [player_payload(p, reveal=reveal) for p in room.players]

    def room_public_state(self, room: Room) -> dict:
        with self._lock:
            return {
                "roomId": room.code,
                "state": room.state.value,
                "players": self.players_payload(room),
                "roundsPlayed": room.rounds_played,
                "lastResult": room.last_outcome.value if room.last_outcome else None,
            }

    # Membership

    def _new_code(self) -> str:
        code = generate_room_code(self.code_length)
        while code in self._rooms:
            code = generate_room_code(self.code_length)
        return code

    def create_room(self, player_id: str, name: str) -> Room:
        with self._lock:
            room = Room(code=self._new_code())
            room.players.append(Player(id=player_id, name=name))
            self._rooms[room.code] = room
            self._player_rooms[player_id] = room.code
            logger.info("room %s created by %s", room.code, name)
            return room

    def check_join(self, code: str, name: str) -> JoinError | None:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return JoinError.NOT_FOUND
            if room.is_full():
                return JoinError.FULL
            if any(p.name == name for p in room.players):
                return JoinError.NAME_TAKEN
            return None

    def join_room(self, player_id: str, code: str, name: str) -> tuple[Room | None, JoinError | None]:
        with self._lock:
            error = self.check_join(code, name)
            if error is not None:
                return None, error

            room = self._rooms[code]
            room.players.append(Player(id=player_id, name=name))
            self._player_rooms[player_id] = code
            if room.is_full():
                for p in room.players:
                    p.reset()
                room.state = RoomState.READY
            else:
                room.state = RoomState.WAITING
            logger.info("player %s joined room %s", name, code)
            return room, None

    def leave(self, player_id: str) -> tuple[str | None, Room | None]:
        """Remove a player from its room.

        Returns ``(code, room)``; ``room`` is ``None`` once the room has been
        deleted, and ``code`` is ``None`` when the player was not seated.
        """
        with self._lock:
            code = self._player_rooms.pop(player_id, None)
            if code is None:
                return None, None
            room = self._rooms.get(code)
            if room is None:
                return code, None

            room.players = [p for p in room.players if p.id != player_id]
            if not room.players:
                room.countdown_id = None
                del self._rooms[code]
                logger.info("room %s deleted", code)
                return code, None

            if len(room.players) < 2:
                # A lone player waits for a new opponent; any running countdown dies.
                if room.state == RoomState.COUNTDOWN:
                    logger.info("room %s countdown aborted, opponent left", code)
                room.countdown_id = None
                room.state = RoomState.WAITING
                for p in room.players:
                    p.reset()
            return code, room

    def disconnect(self, player_id: str) -> tuple[str | None, Room | None]:
        return self.leave(player_id)

    # Round flow

    def submit_choice(self, player_id: str, choice: Choice) -> tuple[Room | None, str | None]:
        """Record a choice.

        Returns ``(room, countdown_id)``. ``countdown_id`` is set only when this
        choice moved the room into the countdown.
        """
        with self._lock:
            room = self.room_of(player_id)
            if room is None:
                return None, None
            if room.state != RoomState.READY:
                return room, None
            player = room.find_player(player_id)
            if player is None:
                return room, None

            player.choice = choice
            player.ready = True

            if room.all_ready():
                room.state = RoomState.COUNTDOWN
                room.countdown_id = uuid.uuid4().hex
                return room, room.countdown_id
            return room, None

    def countdown_alive(self, code: str, countdown_id: str) -> bool:
        with self._lock:
            room = self._rooms.get(code)
            return (
                room is not None
                and room.state == RoomState.COUNTDOWN
                and room.countdown_id == countdown_id
            )

    def finish_round(self, code: str, countdown_id: str) -> RoundResult | None:
        with self._lock:
            if not self.countdown_alive(code, countdown_id):
                return None
            room = self._rooms[code]
            first, second = room.players
            outcome = resolve(first.choice, second.choice)
            revealed = self.players_payload(room, reveal=True)

            for p in room.players:
                p.reset()
            room.countdown_id = None
            room.state = RoomState.RESULT
            room.rounds_played += 1
            room.last_outcome = outcome
            logger.info("room %s round %d finished: %s", code, room.rounds_played, outcome.value)
            return RoundResult(code=code, outcome=outcome, players=revealed)

    def request_rematch(self, player_id: str) -> Room | None:
        with self._lock:
            room = self.room_of(player_id)
            if room is None:
                return None
            if room.state == RoomState.RESULT:
                for p in room.players:
                    p.reset()
                room.state = RoomState.READY
                return room
            if room.state == RoomState.READY:
                return room
            return None
