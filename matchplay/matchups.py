import json
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from itertools import combinations
from pathlib import Path

from matchplay.course import DEFAULT_COURSE_NAME, HOLES_PER_SEGMENT, SEGMENTS, normalize_segment
from matchplay.errors import ScheduleError, ValidationError
from matchplay.strokes import StrokeAllocator, stroke_count

logger = logging.getLogger(__name__)

FOURSOME_SIZE = 4
MATCHES_PER_FOURSOME = 6

# Seat pairs per segment for a foursome seated A, B, C, D.
ROUND_ROBIN_SEATS = {
    "1–6": ((0, 1), (2, 3)),
    "7–12": ((0, 2), (1, 3)),
    "13–18": ((0, 3), (1, 2)),
}


@dataclass(frozen=True)
class Player:
    player_id: int
    name: str
    handicap: int


@dataclass(frozen=True)
class Foursome:
    foursome_id: int
    label: str
    players: tuple[Player, ...]

    @property
    def player_ids(self) -> set[int]:
        return {player.player_id for player in self.players}


@dataclass(frozen=True)
class Matchup:
    foursome_id: int
    player1_id: int
    player2_id: int
    hole_segment: str
    stroke_description: str = ""

    @property
    def key(self) -> tuple[int, int, int, str]:
        return (self.foursome_id, self.player1_id, self.player2_id, self.hole_segment)

    @property
    def pair(self) -> frozenset[int]:
        return frozenset((self.player1_id, self.player2_id))

    def involves(self, player_id: int) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def opponent_of(self, player_id: int) -> int:
        return self.player2_id if player_id == self.player1_id else self.player1_id


@dataclass
class Schedule:
    year: int
    name: str
    course: str
    point_scale: str | None
    foursomes: list[Foursome]
    matchups: list[Matchup] = field(default_factory=list)
    players: dict[int, Player] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.players = {
            player.player_id: player
            for foursome in self.foursomes
            for player in foursome.players
        }

    def player(self, player_id: int) -> Player:
        try:
            return self.players[player_id]
        except KeyError:
            raise ValidationError(f"Unknown player id {player_id}") from None

    def matchups_for(self, foursome_id: int | None = None) -> list[Matchup]:
        if foursome_id is None:
            return list(self.matchups)
        return [matchup for matchup in self.matchups if matchup.foursome_id == foursome_id]


def build_round_robin(foursome: Foursome) -> list[Matchup]:
    if len(foursome.players) != FOURSOME_SIZE:
        raise ScheduleError(
            f"{foursome.label} has {len(foursome.players)} players; round robin needs {FOURSOME_SIZE}"
        )
    matchups: list[Matchup] = []
    for segment in SEGMENTS:
        for first, second in ROUND_ROBIN_SEATS[segment]:
            matchups.append(
                Matchup(
                    foursome.foursome_id,
                    foursome.players[first].player_id,
                    foursome.players[second].player_id,
                    segment,
                )
            )
    return matchups


def _pair_label(pair: frozenset[int], players: dict[int, Player]) -> str:
    names = sorted(players[pid].name if pid in players else str(pid) for pid in pair)
    return " vs ".join(names)


def validate_round_robin(matchups: list[Matchup], foursomes: list[Foursome]) -> None:
    """Every pair within a foursome must meet exactly once, one match per player per segment."""
    problems: list[str] = []
    by_foursome: dict[int, list[Matchup]] = defaultdict(list)
    for matchup in matchups:
        by_foursome[matchup.foursome_id].append(matchup)

    known = {foursome.foursome_id for foursome in foursomes}
    for foursome_id in sorted(set(by_foursome) - known):
        problems.append(f"Matchups reference unknown foursome {foursome_id}")

    seen: dict[int, str] = {}
    for foursome in foursomes:
        for player in foursome.players:
            if player.player_id in seen:
                problems.append(
                    f"Player id {player.player_id} is in both {seen[player.player_id]} and {foursome.label}"
                )
            else:
                seen[player.player_id] = foursome.label

    for foursome in foursomes:
        players = {player.player_id: player for player in foursome.players}
        entries = by_foursome.get(foursome.foursome_id, [])
        if len(foursome.players) != FOURSOME_SIZE:
            problems.append(
                f"{foursome.label}: has {len(foursome.players)} players, needs {FOURSOME_SIZE}"
            )
        if len(entries) != MATCHES_PER_FOURSOME:
            problems.append(
                f"{foursome.label}: has {len(entries)} matchups, needs {MATCHES_PER_FOURSOME}"
            )
        pair_counts: Counter = Counter()
        seat_counts: Counter = Counter()
        for matchup in entries:
            if matchup.player1_id == matchup.player2_id:
                problems.append(
                    f"{foursome.label}: {_pair_label(matchup.pair, players)} plays themselves"
                )
                continue
            outsiders = matchup.pair - foursome.player_ids
            if outsiders:
                problems.append(
                    f"{foursome.label}: players {sorted(outsiders)} are not in this foursome"
                )
                continue
            pair_counts[matchup.pair] += 1
            seat_counts[(matchup.player1_id, matchup.hole_segment)] += 1
            seat_counts[(matchup.player2_id, matchup.hole_segment)] += 1

        expected = {frozenset(pair) for pair in combinations(players, 2)}
        for pair in sorted(expected - set(pair_counts), key=sorted):
            problems.append(f"{foursome.label}: missing {_pair_label(pair, players)}")
        for pair, count in sorted(pair_counts.items(), key=lambda item: sorted(item[0])):
            if count > 1:
                problems.append(
                    f"{foursome.label}: {_pair_label(pair, players)} scheduled {count} times"
                )
        for (player_id, segment), count in sorted(seat_counts.items()):
            if count > 1:
                problems.append(
                    f"{foursome.label}: {players[player_id].name} has {count} matches on holes {segment}"
                )

    if problems:
        raise ScheduleError(
            f"Matchup table is not a complete round robin ({len(problems)} problems)",
            problems,
        )


def find_matchup(
    matchups: list[Matchup],
    foursome_id: int,
    player1_id: int,
    player2_id: int,
    segment: str,
) -> Matchup | None:
    segment = normalize_segment(segment)
    pair = frozenset((player1_id, player2_id))
    for matchup in matchups:
        if (
            matchup.foursome_id == foursome_id
            and matchup.hole_segment == segment
            and matchup.pair == pair
        ):
            return matchup
    return None


def matchup_for_player(matchups: list[Matchup], player_id: int, segment: str) -> Matchup | None:
    segment = normalize_segment(segment)
    return next(
        (m for m in matchups if m.hole_segment == segment and m.involves(player_id)),
        None,
    )


def describe_strokes(player1: Player, player2: Player, strokes_given: int) -> str:
    if strokes_given == 0:
        return "No strokes given"
    giver, receiver = (player2, player1) if player1.handicap > player2.handicap else (player1, player2)
    unit = "stroke" if strokes_given == 1 else "strokes"
    return f"{giver.name} gives {receiver.name} {strokes_given} {unit}"


def match_display(matchup: Matchup, players: dict[int, Player]) -> str:
    first = players[matchup.player1_id].name
    second = players[matchup.player2_id].name
    return f"Foursome {matchup.foursome_id}: {first} vs {second} (holes {matchup.hole_segment})"


def _parse_foursome(entry: dict, index: int) -> Foursome:
    foursome_id = int(entry.get("foursome_id") or index)
    players = tuple(
        Player(
            player_id=int(player["id"]),
            name=str(player["name"]).strip(),
            handicap=int(player.get("handicap", 0)),
        )
        for player in entry.get("players", [])
    )
    return Foursome(foursome_id, entry.get("label") or f"Foursome {foursome_id}", players)


def _parse_matchup(entry: dict) -> Matchup:
    return Matchup(
        foursome_id=int(entry["foursome_id"]),
        player1_id=int(entry["player1"]),
        player2_id=int(entry["player2"]),
        hole_segment=normalize_segment(entry["hole_segment"]),
    )


def load_schedule(path: Path, allocator: StrokeAllocator | None = None) -> Schedule:
    allocator = allocator or StrokeAllocator()
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    foursomes = [
        _parse_foursome(entry, index)
        for index, entry in enumerate(payload.get("foursomes", []), 1)
    ]
    if payload.get("matchups"):
        matchups = [_parse_matchup(entry) for entry in payload["matchups"]]
    else:
        matchups = [m for foursome in foursomes for m in build_round_robin(foursome)]

    schedule = Schedule(
        year=int(payload["year"]),
        name=payload.get("name") or f"Tournament {payload['year']}",
        course=payload.get("course") or DEFAULT_COURSE_NAME,
        point_scale=payload.get("point_scale"),
        foursomes=foursomes,
    )
    players = schedule.players
    described: list[Matchup] = []
    for matchup in matchups:
        first = players.get(matchup.player1_id)
        second = players.get(matchup.player2_id)
        if first and second:
            strokes = min(
                stroke_count(first.handicap - second.handicap, allocator.divisor, allocator.cap),
                HOLES_PER_SEGMENT,
            )
            matchup = replace(matchup, stroke_description=describe_strokes(first, second, strokes))
        described.append(matchup)
    schedule.matchups = described
    logger.info(
        "Loaded %s: %d foursomes, %d matchups", schedule.name, len(foursomes), len(described)
    )
    return schedule
