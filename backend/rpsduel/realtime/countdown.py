from __future__ import annotations

import logging

from flask_socketio import SocketIO

from ..game.service import RoomRegistry

logger = logging.getLogger(__name__)

COUNTDOWN_STEPS: tuple[tuple[int, str], ...] = (
    (3, "剪刀"),
    (2, "石頭"),
    (1, "布"),
)
GO_STEP: tuple[int, str] = (0, "開！")


class CountdownScheduler:
    """Runs the tick sequence that ends a round.

    A countdown only carries the room code and its countdown id, and checks
    both against the registry before every emit, so a room that was deleted
    or lost a player silently stops the sequence.
    """

    def __init__(
        self,
        socketio: SocketIO,
        registry: RoomRegistry,
        tick_sec: float = 1.0,
        resolve_delay_sec: float = 0.5,
        inline: bool = False,
    ):
        self.socketio = socketio
        self.registry = registry
        self.tick_sec = tick_sec
        self.resolve_delay_sec = resolve_delay_sec
        self.inline = inline

    def start(self, code: str, countdown_id: str) -> None:
        logger.info("room %s countdown started", code)
        if self.inline:
            self._run(code, countdown_id)
        else:
            self.socketio.start_background_task(self._run, code, countdown_id)

    def _run(self, code: str, countdown_id: str) -> None:
        try:
            for count, message in COUNTDOWN_STEPS + (GO_STEP,):
                self.socketio.sleep(self.tick_sec)
                if not self.registry.countdown_alive(code, countdown_id):
                    return
                self.socketio.emit("countdown", {"count": count, "message": message}, to=code)

            self.socketio.sleep(self.resolve_delay_sec)
            result = self.registry.finish_round(code, countdown_id)
            if result is None:
                return
            self.socketio.emit(
                "gameResult",
                {"players": result.players, "result": result.outcome.value},
                to=code,
            )
        except Exception:
            logger.exception("room %s countdown failed", code)
