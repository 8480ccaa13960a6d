import pytest

from shoom import phases
from shoom.models import Phase, Player, RoomState


def room_in(phase, time_left=0, player=None):
    return RoomState(phase=phase, time_left=time_left, active_player=player)


@pytest.mark.parametrize("phase", list(Phase))
def test_start_goes_to_intro_from_anywhere(phase):
    room = phases.apply_admin_action(room_in(phase, 7, Player.B), "start")

    assert (room.phase, room.time_left, room.active_player) == (Phase.INTRO, 15, None)


@pytest.mark.parametrize("current, expected", [
    (Phase.INTRO, (Phase.ROUND_A, 45, Player.A)),
    (Phase.ROUND_A, (Phase.ROUND_B, 45, Player.B)),
    (Phase.ROUND_B, (Phase.AD, 5, None)),
    (Phase.AD, (Phase.VOTING, 0, None)),
])
def test_next_round_follows_pipeline(current, expected):
    room = phases.apply_admin_action(room_in(current, 3), "next_round")

    assert (room.phase, room.time_left, room.active_player) == expected


@pytest.mark.parametrize("phase", [Phase.WAITING, Phase.VOTING, Phase.FINISHED, Phase.RAGE])
def test_next_round_resyncs_to_round_a(phase):
    room = phases.apply_admin_action(room_in(phase), "next_round")

    assert (room.phase, room.time_left, room.active_player) == (Phase.ROUND_A, 45, Player.A)


def test_reset_keeps_viewers_and_clears_history():
    room = room_in(Phase.ROUND_B, 12, Player.B)
    room.viewers_count = 9
    room.chat_messages.append(object())
    room.donations.append(object())

    fresh = phases.apply_admin_action(room, "reset")

    assert fresh.phase is Phase.WAITING
    assert fresh.time_left == 0
    assert fresh.active_player is None
    assert fresh.viewers_count == 9
    assert fresh.chat_messages == []
    assert fresh.donations == []


def test_reset_twice_is_idempotent():
    room = room_in(Phase.AD, 4)
    room.viewers_count = 2

    once = phases.apply_admin_action(room, "reset")
    twice = phases.apply_admin_action(once, "reset")

    assert once.to_snapshot() == twice.to_snapshot()


def test_unknown_action_leaves_room_alone():
    room = room_in(Phase.ROUND_A, 30, Player.A)

    result = phases.apply_admin_action(room, "explode")

    assert result is room
    assert (room.phase, room.time_left, room.active_player) == (Phase.ROUND_A, 30, Player.A)


def run_ticks(room, count):
    for _ in range(count):
        phases.tick(room)
        assert room.time_left >= 0


def test_auto_advance_walks_the_whole_show():
    room = phases.apply_admin_action(RoomState(), "start")

    run_ticks(room, 15)
    assert (room.phase, room.time_left, room.active_player) == (Phase.ROUND_A, 45, Player.A)

    run_ticks(room, 45)
    assert (room.phase, room.time_left, room.active_player) == (Phase.ROUND_B, 45, Player.B)

    run_ticks(room, 45)
    assert (room.phase, room.time_left, room.active_player) == (Phase.AD, 5, None)

    run_ticks(room, 5)
    assert (room.phase, room.time_left, room.active_player) == (Phase.VOTING, 0, None)

    for _ in range(10):
        assert phases.tick(room) is False
    assert room.phase is Phase.VOTING


@pytest.mark.parametrize("phase", [Phase.WAITING, Phase.VOTING, Phase.FINISHED, Phase.RAGE])
def test_clock_holds_outside_pipeline(phase):
    room = room_in(phase)

    assert phases.tick(room) is False
    assert room.phase is phase


def test_tick_reports_decrement_without_transition():
    room = room_in(Phase.ROUND_A, 10, Player.A)

    assert phases.tick(room) is True
    assert room.time_left == 9
    assert room.phase is Phase.ROUND_A


def test_rage_and_finished_are_never_entered():
    room = RoomState()
    seen = {room.phase}
    for action in ["start", "next_round", "next_round", "next_round", "next_round",
                   "next_round", "reset", "next_round"]:
        room = phases.apply_admin_action(room, action)
        seen.add(room.phase)
        for _ in range(120):
            phases.tick(room)
            seen.add(room.phase)

    assert Phase.RAGE not in seen
    assert Phase.FINISHED not in seen


def test_tick_refreshes_last_activity():
    room = room_in(Phase.ROUND_A, 30, Player.A)
    room.last_activity = 0.0

    phases.tick(room)

    assert room.last_activity > 0.0


def test_idle_tick_leaves_last_activity_alone():
    room = room_in(Phase.WAITING)
    room.last_activity = 0.0

    phases.tick(room)

    assert room.last_activity == 0.0
