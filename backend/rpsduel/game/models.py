from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Choice(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class Outcome(str, Enum):
    TIE = "tie"
    PLAYER1 = "player1"
    PLAYER2 = "player2"


class RoomState(str, Enum):
    WAITING = "waiting"
    READY = "ready"
    COUNTDOWN = "countdown"
    RESULT = "result"


MAX_PLAYERS = 2


@dataclass
class Player:
    id: str
    name: str
    choice: Choice | None = None
    ready: bool = False

    def reset(self) -> None:
        self.choice = None
        self.ready = False


@dataclass
class Room:
    code: str
    players: list[Player] = field(default_factory=list)
    state: RoomState = RoomState.WAITING
    # Identifies the one countdown allowed to act on this room.
    countdown_id: str | None = None
    rounds_played: int = 0
    last_outcome: Outcome | None = None

    def find_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    def all_ready(self) -> bool:
        return self.is_full() and all(p.ready and p.choice is not None for p in self.players)


@dataclass
class RoundResult:
    code: str
    outcome: Outcome
    players: list[dict]
