from __future__ import annotations

from .models import Choice, Outcome

# Each choice maps to the one it defeats.
BEATS: dict[Choice, Choice] = {
    Choice.ROCK: Choice.SCISSORS,
    Choice.SCISSORS: Choice.PAPER,
    Choice.PAPER: Choice.ROCK,
}


def resolve(first: Choice, second: Choice) -> Outcome:
    """Decide a round from the first and second player's choices."""
    if first == second:
        return Outcome.TIE
    if BEATS[first] == second:
        return Outcome.PLAYER1
    return Outcome.PLAYER2


def parse_choice(raw: object) -> Choice | None:
    value = str(raw or "").strip().lower()
    try:
        return Choice(value)
    except ValueError:
        return None
