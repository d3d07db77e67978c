from dataclasses import asdict, dataclass

from matchplay.matchups import Matchup, Player, Schedule
from matchplay.scoring import MatchResult


@dataclass
class PlayerStanding:
    player_id: int
    name: str
    total_points: float = 0
    matches_played: int = 0
    matches_won: int = 0
    matches_tied: int = 0
    matches_lost: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def _record_player(standing: PlayerStanding, result: MatchResult) -> None:
    standing.matches_played += 1
    standing.total_points += result.points_for(standing.player_id)
    if result.winner_id is None:
        standing.matches_tied += 1
    elif result.winner_id == standing.player_id:
        standing.matches_won += 1
    else:
        standing.matches_lost += 1


def build_standings(
    results: list[MatchResult],
    matchups: list[Matchup],
    players: dict[int, Player],
    foursome_id: int | None = None,
) -> list[PlayerStanding]:
    """Fold results into standings for every player in the matchup table.

    Ordered by total points descending, then name and id ascending.
    """
    if foursome_id is not None:
        matchups = [m for m in matchups if m.foursome_id == foursome_id]
        results = [r for r in results if r.foursome_id == foursome_id]

    standings: dict[int, PlayerStanding] = {}
    for matchup in matchups:
        for player_id in (matchup.player1_id, matchup.player2_id):
            if player_id not in standings:
                player = players.get(player_id)
                name = player.name if player else f"Player {player_id}"
                standings[player_id] = PlayerStanding(player_id, name)

    for result in results:
        for player_id in (result.player1_id, result.player2_id):
            entry = standings.setdefault(player_id, PlayerStanding(player_id, f"Player {player_id}"))
            _record_player(entry, result)

    return sorted(
        standings.values(),
        key=lambda entry: (-entry.total_points, entry.name, entry.player_id),
    )


class LeaderboardAggregator:
    def __init__(self, store, schedule: Schedule) -> None:
        self.store = store
        self.schedule = schedule

    def compute(self, tournament_year: int, foursome_id: int | None = None) -> list[PlayerStanding]:
        results = self.store.fetch_match_results(tournament_year, foursome_id)
        matchups = self.schedule.matchups if tournament_year == self.schedule.year else []
        return build_standings(results, matchups, self.schedule.players, foursome_id)
