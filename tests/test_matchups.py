import json
from collections import Counter
from itertools import combinations

import pytest

from matchplay.errors import ScheduleError, ValidationError
from matchplay.matchups import (
    Foursome,
    Matchup,
    Player,
    build_round_robin,
    describe_strokes,
    find_matchup,
    load_schedule,
    matchup_for_player,
    validate_round_robin,
)
from matchplay.strokes import StrokeAllocator

FOURSOME = Foursome(
    1,
    "Foursome 1",
    (
        Player(1, "Jordan", 14),
        Player(2, "Christian", 14),
        Player(3, "Connor", 11),
        Player(4, "Mystery", 12),
    ),
)


def test_bundled_schedule_is_a_complete_round_robin(schedule):
    assert schedule.year == 2026
    assert len(schedule.foursomes) == 4
    assert len(schedule.matchups) == 24
    validate_round_robin(schedule.matchups, schedule.foursomes)


def test_round_robin_pairs_everyone_once():
    matchups = build_round_robin(FOURSOME)

    assert len(matchups) == 6
    pairs = Counter(m.pair for m in matchups)
    assert set(pairs) == {frozenset(p) for p in combinations([1, 2, 3, 4], 2)}
    assert set(pairs.values()) == {1}


def test_round_robin_seats_each_player_once_per_segment():
    matchups = build_round_robin(FOURSOME)

    for segment in ("1–6", "7–12", "13–18"):
        seated = [pid for m in matchups if m.hole_segment == segment for pid in (m.player1_id, m.player2_id)]
        assert sorted(seated) == [1, 2, 3, 4]


def test_round_robin_needs_four_players():
    threesome = Foursome(9, "Team 7", FOURSOME.players[:3])

    with pytest.raises(ScheduleError):
        build_round_robin(threesome)


def test_patched_duplicate_matchups_are_reported():
    matchups = build_round_robin(FOURSOME) + [
        Matchup(1, 2, 3, "13–18"),
        Matchup(1, 4, 1, "1–6"),
    ]

    with pytest.raises(ScheduleError) as excinfo:
        validate_round_robin(matchups, [FOURSOME])

    problems = excinfo.value.problems
    assert any("scheduled 2 times" in problem for problem in problems)
    assert any("has 2 matches on holes 1–6" in problem for problem in problems)
    assert isinstance(excinfo.value, ValidationError)


def test_missing_pairing_is_reported():
    matchups = [m for m in build_round_robin(FOURSOME) if m.pair != frozenset((1, 4))]

    with pytest.raises(ScheduleError) as excinfo:
        validate_round_robin(matchups, [FOURSOME])

    assert excinfo.value.problems == [
        "Foursome 1: has 5 matchups, needs 6",
        "Foursome 1: missing Jordan vs Mystery",
    ]


def test_outsider_and_self_matchups_are_reported():
    matchups = build_round_robin(FOURSOME) + [Matchup(1, 1, 99, "7–12"), Matchup(1, 2, 2, "7–12")]

    with pytest.raises(ScheduleError) as excinfo:
        validate_round_robin(matchups, [FOURSOME])

    problems = excinfo.value.problems
    assert any("not in this foursome" in problem for problem in problems)
    assert any("plays themselves" in problem for problem in problems)


def test_find_matchup_ignores_player_order(schedule):
    matchup = find_matchup(schedule.matchups, 4, 14, 13, "1-6")

    assert matchup is not None
    assert (matchup.player1_id, matchup.player2_id) == (13, 14)
    assert find_matchup(schedule.matchups, 4, 14, 13, "7–12") is None


def test_matchup_for_player(schedule):
    matchup = matchup_for_player(schedule.matchups, 13, "13–18")

    assert matchup.opponent_of(13) == 16


def test_stroke_descriptions(schedule):
    by_pair = {m.pair: m.stroke_description for m in schedule.matchups}

    assert by_pair[frozenset((13, 14))] == "Player 4B gives Player 4A 3 strokes"
    assert by_pair[frozenset((13, 16))] == "Player 4A gives Player 4D 1 stroke"
    assert by_pair[frozenset((14, 15))] == "No strokes given"


def test_describe_strokes_names_the_giver():
    low = Player(1, "Low", 4)
    high = Player(2, "High", 10)

    assert describe_strokes(high, low, 2) == "Low gives High 2 strokes"
    assert describe_strokes(low, high, 2) == "Low gives High 2 strokes"


def test_load_schedule_with_explicit_matchups(tmp_path):
    config = {
        "year": 2025,
        "foursomes": [
            {
                "foursome_id": 7,
                "players": [
                    {"id": 1, "name": "A", "handicap": 3},
                    {"id": 2, "name": "B", "handicap": 9},
                    {"id": 3, "name": "C", "handicap": 12},
                    {"id": 4, "name": "D", "handicap": 2},
                ],
            }
        ],
        "matchups": [
            {"foursome_id": 7, "player1": 1, "player2": 4, "hole_segment": "1-6"},
            {"foursome_id": 7, "player1": 2, "player2": 3, "hole_segment": "1-6"},
        ],
    }
    path = tmp_path / "tournament.json"
    path.write_text(json.dumps(config), encoding="utf-8")

    loaded = load_schedule(path)

    assert loaded.name == "Tournament 2025"
    assert loaded.foursomes[0].label == "Foursome 7"
    assert [m.hole_segment for m in loaded.matchups] == ["1–6", "1–6"]
    assert loaded.matchups[0].stroke_description == "No strokes given"
    assert loaded.matchups[1].stroke_description == "B gives C 1 stroke"
    with pytest.raises(ScheduleError):
        validate_round_robin(loaded.matchups, loaded.foursomes)


def test_unknown_player_lookup(schedule):
    with pytest.raises(ValidationError):
        schedule.player(404)


def test_threesome_with_explicit_matchups_is_rejected():
    threesome = Foursome(9, "Team 7", FOURSOME.players[:3])
    matchups = [
        Matchup(9, 1, 2, "1–6"),
        Matchup(9, 1, 3, "7–12"),
        Matchup(9, 2, 3, "13–18"),
    ]

    with pytest.raises(ScheduleError) as excinfo:
        validate_round_robin(matchups, [threesome])

    assert excinfo.value.problems == [
        "Team 7: has 3 players, needs 4",
        "Team 7: has 3 matchups, needs 6",
    ]


def test_player_in_two_foursomes_is_reported():
    other = Foursome(
        2,
        "Foursome 2",
        (Player(5, "Ava", 10), Player(6, "Ben", 12), Player(7, "Cal", 8), Player(4, "Mystery", 12)),
    )

    with pytest.raises(ScheduleError) as excinfo:
        validate_round_robin(build_round_robin(FOURSOME) + build_round_robin(other), [FOURSOME, other])

    assert excinfo.value.problems == ["Player id 4 is in both Foursome 1 and Foursome 2"]


def test_stroke_description_never_exceeds_a_segment(tmp_path):
    config = {
        "year": 2026,
        "foursomes": [
            {
                "foursome_id": 1,
                "players": [
                    {"id": 1, "name": "Scratch", "handicap": 0},
                    {"id": 2, "name": "Hacker", "handicap": 36},
                    {"id": 3, "name": "C", "handicap": 0},
                    {"id": 4, "name": "D", "handicap": 0},
                ],
            }
        ],
    }
    path = tmp_path / "tournament.json"
    path.write_text(json.dumps(config), encoding="utf-8")

    loaded = load_schedule(path, StrokeAllocator(divisor=3, cap=10))

    by_pair = {m.pair: m.stroke_description for m in loaded.matchups}
    assert by_pair[frozenset((1, 2))] == "Scratch gives Hacker 6 strokes"


def test_players_index_is_built_once(schedule):
    assert schedule.players is schedule.players
    assert len(schedule.players) == 16
    assert schedule.player(13).name == "Player 4A"
