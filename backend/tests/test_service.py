from rpsduel.game.models import Choice, Outcome, RoomState
from rpsduel.game.service import JoinError, RoomRegistry


def _full_room(registry: RoomRegistry):
    room = registry.create_room("sid-a", "Alice")
    registry.join_room("sid-b", room.code, "Bob")
    return room


def test_create_room_indexes_creator():
    registry = RoomRegistry()
    room = registry.create_room("sid-a", "Alice")

    assert room.state == RoomState.WAITING
    assert [p.name for p in room.players] == ["Alice"]
    assert registry.get_room(room.code) is room
    assert registry.room_of("sid-a") is room


def test_join_moves_room_to_ready():
    registry = RoomRegistry()
    room = _full_room(registry)

    assert room.state == RoomState.READY
    assert [p.id for p in room.players] == ["sid-a", "sid-b"]
    assert registry.room_of("sid-b") is room


def test_join_unknown_room():
    registry = RoomRegistry()
    room, error = registry.join_room("sid-b", "NOPE00", "Bob")
    assert room is None
    assert error == JoinError.NOT_FOUND
    assert registry.room_of("sid-b") is None


def test_join_full_room_never_mutates():
    registry = RoomRegistry()
    room = _full_room(registry)
    before = [(p.id, p.name) for p in room.players]

    result, error = registry.join_room("sid-c", room.code, "Carol")

    assert result is None
    assert error == JoinError.FULL
    assert [(p.id, p.name) for p in room.players] == before
    assert room.state == RoomState.READY
    assert registry.room_of("sid-c") is None


def test_join_name_taken_is_case_sensitive():
    registry = RoomRegistry()
    room = registry.create_room("sid-a", "Alice")

    result, error = registry.join_room("sid-b", room.code, "Alice")
    assert result is None
    assert error == JoinError.NAME_TAKEN
    assert [p.name for p in room.players] == ["Alice"]
    assert room.state == RoomState.WAITING

    result, error = registry.join_room("sid-b", room.code, "alice")
    assert error is None
    assert len(result.players) == 2


def test_repeated_choice_overwrites_only_own():
    registry = RoomRegistry()
    room = _full_room(registry)

    _, countdown_id = registry.submit_choice("sid-a", Choice.ROCK)
    assert countdown_id is None
    _, countdown_id = registry.submit_choice("sid-a", Choice.PAPER)
    assert countdown_id is None

    alice, bob = room.players
    assert alice.choice == Choice.PAPER and alice.ready
    assert bob.choice is None and not bob.ready
    assert room.state == RoomState.READY


def test_both_choices_start_exactly_one_countdown():
    registry = RoomRegistry()
    room = _full_room(registry)

    registry.submit_choice("sid-a", Choice.ROCK)
    _, countdown_id = registry.submit_choice("sid-b", Choice.SCISSORS)

    assert countdown_id is not None
    assert room.state == RoomState.COUNTDOWN
    assert registry.countdown_alive(room.code, countdown_id)

    # Late choices during the countdown are ignored but still return the room.
    same_room, again = registry.submit_choice("sid-a", Choice.PAPER)
    assert same_room is room
    assert again is None
    assert room.players[0].choice == Choice.ROCK


def test_choice_from_unknown_player_is_noop():
    registry = RoomRegistry()
    assert registry.submit_choice("ghost", Choice.ROCK) == (None, None)


def test_choice_while_waiting_is_ignored():
    registry = RoomRegistry()
    room = registry.create_room("sid-a", "Alice")

    same_room, countdown_id = registry.submit_choice("sid-a", Choice.ROCK)

    assert same_room is room
    assert countdown_id is None
    assert room.players[0].choice is None


def test_full_round_resets_players_and_rematch():
    registry = RoomRegistry()
    room = _full_room(registry)
    registry.submit_choice("sid-a", Choice.ROCK)
    _, countdown_id = registry.submit_choice("sid-b", Choice.SCISSORS)

    result = registry.finish_round(room.code, countdown_id)

    assert result.outcome == Outcome.PLAYER1
    assert [p["choice"] for p in result.players] == ["rock", "scissors"]
    assert room.state == RoomState.RESULT
    assert room.rounds_played == 1
    assert all(p.choice is None and not p.ready for p in room.players)
    # A finished countdown cannot resolve twice.
    assert registry.finish_round(room.code, countdown_id) is None

    assert registry.request_rematch("sid-b") is room
    assert room.state == RoomState.READY
    assert len(room.players) == 2


def test_rematch_rejected_outside_result_or_ready():
    registry = RoomRegistry()
    registry.create_room("sid-a", "Alice")
    assert registry.request_rematch("sid-a") is None
    assert registry.request_rematch("ghost") is None


def test_leave_demotes_to_waiting_and_kills_countdown():
    registry = RoomRegistry()
    room = _full_room(registry)
    registry.submit_choice("sid-a", Choice.ROCK)
    _, countdown_id = registry.submit_choice("sid-b", Choice.PAPER)

    code, remaining = registry.leave("sid-b")

    assert code == room.code
    assert remaining is room
    assert room.state == RoomState.WAITING
    assert [p.id for p in room.players] == ["sid-a"]
    assert room.players[0].choice is None
    assert not registry.countdown_alive(room.code, countdown_id)
    assert registry.finish_round(room.code, countdown_id) is None
    assert registry.room_of("sid-b") is None


def test_last_player_leaving_deletes_room():
    registry = RoomRegistry()
    room = registry.create_room("sid-a", "Alice")

    code, remaining = registry.disconnect("sid-a")

    assert code == room.code
    assert remaining is None
    assert registry.get_room(room.code) is None
    assert registry.room_of("sid-a") is None
    _, error = registry.join_room("sid-b", room.code, "Bob")
    assert error == JoinError.NOT_FOUND


def test_leave_and_disconnect_converge():
    def snapshot(registry, code):
        room = registry.get_room(code)
        return (
            room.state,
            [(p.id, p.name, p.choice, p.ready) for p in room.players],
            registry.room_of("sid-a") is room,
            registry.room_of("sid-b"),
        )

    left = RoomRegistry()
    dropped = RoomRegistry()
    results = []
    for registry, exit_ in ((left, left.leave), (dropped, dropped.disconnect)):
        room = _full_room(registry)
        registry.submit_choice("sid-a", Choice.ROCK)
        exit_("sid-b")
        results.append(snapshot(registry, room.code))

    assert results[0] == results[1]


def test_leave_unknown_player():
    registry = RoomRegistry()
    assert registry.leave("ghost") == (None, None)


def test_check_join_reports_without_mutating():
    registry = RoomRegistry()
    room = _full_room(registry)
    open_room = registry.create_room("sid-c", "Carol")

    assert registry.check_join("NOPE00", "Dave") == JoinError.NOT_FOUND
    assert registry.check_join(room.code, "Dave") == JoinError.FULL
    assert registry.check_join(open_room.code, "Carol") == JoinError.NAME_TAKEN
    assert registry.check_join(open_room.code, "Dave") is None
    assert [p.name for p in open_room.players] == ["Carol"]
    assert registry.room_of("sid-b") is room
