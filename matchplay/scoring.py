import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from matchplay.course import HOLES_PER_SEGMENT, CourseHole, normalize_segment, segment_holes
from matchplay.errors import ConflictError, NotFoundError, ValidationError
from matchplay.matchups import Schedule, find_matchup
from matchplay.strokes import StrokeAllocation, StrokeAllocator

logger = logging.getLogger(__name__)

MAX_HOLE_SCORE = 20
MAX_SEGMENT_SCORE = MAX_HOLE_SCORE * HOLES_PER_SEGMENT


@dataclass(frozen=True)
class PointScale:
    win: float
    tie: float
    loss: float = 0

    @property
    def label(self) -> str:
        return "/".join(f"{value:g}" for value in (self.win, self.tie, self.loss))

    @property
    def match_total(self) -> float:
        return self.win + self.loss


POINT_SCALES = {
    "2/1/0": PointScale(2, 1, 0),
    "6/3/0": PointScale(6, 3, 0),
}
DEFAULT_POINT_SCALE = "2/1/0"


def parse_point_scale(value: str | None) -> PointScale:
    """Parse "win/tie/loss". A tie must split the same total a decided match awards."""
    text = (value or DEFAULT_POINT_SCALE).strip()
    if text in POINT_SCALES:
        return POINT_SCALES[text]
    parts = text.split("/")
    if len(parts) != 3:
        raise ValueError(f"Point scale must look like win/tie/loss, got {value!r}")
    try:
        win, tie, loss = (float(part) for part in parts)
    except ValueError:
        raise ValueError(f"Point scale must be numeric, got {value!r}") from None
    if win + loss != 2 * tie:
        raise ValueError(f"Point scale {value!r} does not award a constant total per match")
    if not win > tie > loss:
        raise ValueError(f"Point scale {value!r} must rank win above tie above loss")
    return PointScale(win, tie, loss)


@dataclass(frozen=True)
class MatchResult:
    tournament_year: int
    foursome_id: int
    player1_id: int
    player2_id: int
    player1_handicap: int
    player2_handicap: int
    hole_segment: str
    strokes_given: int
    stroke_recipient_id: int | None
    stroke_holes: list[int]
    player1_gross_score: int
    player2_gross_score: int
    player1_net_score: int
    player2_net_score: int
    winner_id: int | None
    points_awarded: dict[str, float]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None

    @property
    def result(self) -> str:
        if self.winner_id is None:
            return "tie"
        return "player1_win" if self.winner_id == self.player1_id else "player2_win"

    def points_for(self, player_id: int) -> float:
        if player_id == self.player1_id:
            return self.points_awarded["player1"]
        if player_id == self.player2_id:
            return self.points_awarded["player2"]
        return 0

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "tournament_year": self.tournament_year,
            "foursome_id": self.foursome_id,
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "player1_handicap": self.player1_handicap,
            "player2_handicap": self.player2_handicap,
            "hole_segment": self.hole_segment,
            "strokes_given": self.strokes_given,
            "stroke_recipient_id": self.stroke_recipient_id,
            "stroke_holes": list(self.stroke_holes),
            "player1_gross_score": self.player1_gross_score,
            "player2_gross_score": self.player2_gross_score,
            "player1_net_score": self.player1_net_score,
            "player2_net_score": self.player2_net_score,
            "winner_id": self.winner_id,
            "result": self.result,
            "points_awarded": dict(self.points_awarded),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class SegmentOutcome:
    player1_net_score: int
    player2_net_score: int
    winner_id: int | None
    points_awarded: dict[str, float]


def decide_segment(
    gross_score1: int,
    gross_score2: int,
    allocation: StrokeAllocation,
    player1_id: int,
    player2_id: int,
    scale: PointScale,
) -> SegmentOutcome:
    net1 = gross_score1 - allocation.strokes_for(player1_id)
    net2 = gross_score2 - allocation.strokes_for(player2_id)
    if net1 < net2:
        winner = player1_id
        points = {"player1": scale.win, "player2": scale.loss}
    elif net2 < net1:
        winner = player2_id
        points = {"player1": scale.loss, "player2": scale.win}
    else:
        winner = None
        points = {"player1": scale.tie, "player2": scale.tie}
    return SegmentOutcome(net1, net2, winner, points)


def net_scorecard(
    hole_scores: list[dict],
    allocation: StrokeAllocation,
    player1_id: int,
    player2_id: int,
    holes: list[CourseHole],
) -> list[dict]:
    """Per-hole rows marking which holes carry the recipient's strokes."""
    score_map = {entry["hole_number"]: entry for entry in hole_scores}
    stroke_holes = set(allocation.stroke_holes)
    recipient = allocation.stroke_recipient_id
    rows: list[dict] = []
    for hole in holes:
        entry = score_map.get(hole.hole_number, {})
        gross1 = entry.get("player1_score")
        gross2 = entry.get("player2_score")
        stroke1 = 1 if hole.hole_number in stroke_holes and recipient == player1_id else 0
        stroke2 = 1 if hole.hole_number in stroke_holes and recipient == player2_id else 0
        rows.append(
            {
                "hole_number": hole.hole_number,
                "par": hole.par,
                "handicap": hole.handicap,
                "stroke_hole": hole.hole_number in stroke_holes,
                "gross1": gross1,
                "gross2": gross2,
                "net1": gross1 - stroke1 if gross1 is not None else None,
                "net2": gross2 - stroke2 if gross2 is not None else None,
            }
        )
    return rows


def _positive_score(value, label: str, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{label} must be a positive whole number")
    if value > maximum:
        raise ValidationError(f"{label} cannot be more than {maximum}")
    return value


def _totals_from_holes(hole_scores: list[dict], holes: list[CourseHole]) -> tuple[int, int]:
    wanted = [hole.hole_number for hole in holes]
    numbers = [entry.get("hole_number") for entry in hole_scores]
    if sorted(numbers) != wanted:
        raise ValidationError(f"Hole scores must cover holes {wanted} exactly once")
    total1 = 0
    total2 = 0
    for entry in hole_scores:
        label = f"Hole {entry['hole_number']} score"
        total1 += _positive_score(entry.get("player1_score"), label, MAX_HOLE_SCORE)
        total2 += _positive_score(entry.get("player2_score"), label, MAX_HOLE_SCORE)
    return total1, total2


def swap_hole_scores(hole_scores: list[dict]) -> list[dict]:
    return [
        {**entry, "player1_score": entry.get("player2_score"), "player2_score": entry.get("player1_score")}
        for entry in hole_scores
    ]


class MatchResultRecorder:
    def __init__(
        self,
        store,
        schedule: Schedule,
        scale: PointScale,
        course_holes: list[CourseHole],
        allocator: StrokeAllocator | None = None,
    ) -> None:
        self.store = store
        self.schedule = schedule
        self.scale = scale
        self.course_holes = course_holes
        self.allocator = allocator or StrokeAllocator()

    def allocation_for(self, player1_id: int, player2_id: int, segment: str) -> StrokeAllocation:
        first = self.schedule.player(player1_id)
        second = self.schedule.player(player2_id)
        return self.allocator.compute(
            first.player_id,
            first.handicap,
            second.player_id,
            second.handicap,
            segment_holes(segment, self.course_holes),
        )

    def _gross_totals(
        self,
        segment: str,
        gross_score1: int | None,
        gross_score2: int | None,
        hole_scores: list[dict] | None,
    ) -> tuple[int, int]:
        if hole_scores:
            return _totals_from_holes(hole_scores, segment_holes(segment, self.course_holes))
        return (
            _positive_score(gross_score1, "Player 1 score", MAX_SEGMENT_SCORE),
            _positive_score(gross_score2, "Player 2 score", MAX_SEGMENT_SCORE),
        )

    def record(
        self,
        tournament_year: int,
        foursome_id: int,
        player1_id: int,
        player2_id: int,
        hole_segment: str,
        gross_score1: int | None = None,
        gross_score2: int | None = None,
        hole_scores: list[dict] | None = None,
    ) -> MatchResult:
        if player1_id == player2_id:
            raise ValidationError("A player cannot be matched against themselves")
        segment = normalize_segment(hole_segment)
        if tournament_year != self.schedule.year:
            raise ValidationError(f"No matchup table for tournament year {tournament_year}")
        matchup = find_matchup(self.schedule.matchups, foursome_id, player1_id, player2_id, segment)
        if matchup is None:
            raise ValidationError(
                f"No matchup between players {player1_id} and {player2_id} "
                f"on holes {segment} in foursome {foursome_id}"
            )

        gross_score1, gross_score2 = self._gross_totals(segment, gross_score1, gross_score2, hole_scores)
        if matchup.player1_id != player1_id:
            gross_score1, gross_score2 = gross_score2, gross_score1

        first = self.schedule.player(matchup.player1_id)
        second = self.schedule.player(matchup.player2_id)
        allocation = self.allocation_for(first.player_id, second.player_id, segment)
        outcome = decide_segment(
            gross_score1, gross_score2, allocation, first.player_id, second.player_id, self.scale
        )
        result = MatchResult(
            tournament_year=tournament_year,
            foursome_id=foursome_id,
            player1_id=first.player_id,
            player2_id=second.player_id,
            player1_handicap=first.handicap,
            player2_handicap=second.handicap,
            hole_segment=segment,
            strokes_given=allocation.strokes_given,
            stroke_recipient_id=allocation.stroke_recipient_id,
            stroke_holes=list(allocation.stroke_holes),
            player1_gross_score=gross_score1,
            player2_gross_score=gross_score2,
            player1_net_score=outcome.player1_net_score,
            player2_net_score=outcome.player2_net_score,
            winner_id=outcome.winner_id,
            points_awarded=outcome.points_awarded,
        )
        result_id = self.store.insert_match_result(result)
        if result_id is None:
            logger.warning(
                "Duplicate result for foursome %s, players %s/%s, holes %s",
                foursome_id,
                first.player_id,
                second.player_id,
                segment,
            )
            raise ConflictError(
                f"A result for {first.name} vs {second.name} on holes {segment} is already recorded"
            )
        logger.info(
            "Recorded result %s: %s %s-%s %s (holes %s, %s)",
            result_id,
            first.name,
            outcome.player1_net_score,
            outcome.player2_net_score,
            second.name,
            segment,
            result.result,
        )
        return replace(result, id=result_id)

    def correct(
        self,
        result_id: int,
        gross_score1: int | None = None,
        gross_score2: int | None = None,
        hole_scores: list[dict] | None = None,
    ) -> MatchResult:
        """Replace the gross scores of a stored result and recompute it in place.

        Scores are given in the stored player order. Strokes come from the
        handicaps stored with the result, so later handicap changes do not
        rewrite history.
        """
        existing = self.store.fetch_match_result(result_id)
        if existing is None:
            raise NotFoundError(f"No match result with id {result_id}")

        gross_score1, gross_score2 = self._gross_totals(
            existing.hole_segment, gross_score1, gross_score2, hole_scores
        )
        allocation = self.allocator.compute(
            existing.player1_id,
            existing.player1_handicap,
            existing.player2_id,
            existing.player2_handicap,
            segment_holes(existing.hole_segment, self.course_holes),
        )
        outcome = decide_segment(
            gross_score1,
            gross_score2,
            allocation,
            existing.player1_id,
            existing.player2_id,
            self.scale,
        )
        corrected = replace(
            existing,
            strokes_given=allocation.strokes_given,
            stroke_recipient_id=allocation.stroke_recipient_id,
            stroke_holes=list(allocation.stroke_holes),
            player1_gross_score=gross_score1,
            player2_gross_score=gross_score2,
            player1_net_score=outcome.player1_net_score,
            player2_net_score=outcome.player2_net_score,
            winner_id=outcome.winner_id,
            points_awarded=outcome.points_awarded,
        )
        if not self.store.update_match_result(corrected):
            raise NotFoundError(f"No match result with id {result_id}")
        logger.info(
            "Corrected result %s: %s-%s became %s-%s (%s)",
            result_id,
            existing.player1_gross_score,
            existing.player2_gross_score,
            gross_score1,
            gross_score2,
            corrected.result,
        )
        return corrected
