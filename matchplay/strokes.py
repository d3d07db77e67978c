from dataclasses import dataclass, field

from matchplay.course import CourseHole
from matchplay.settings import DEFAULT_STROKE_CAP, DEFAULT_STROKE_DIVISOR


@dataclass(frozen=True)
class StrokeAllocation:
    strokes_given: int = 0
    stroke_recipient_id: int | None = None
    stroke_holes: list[int] = field(default_factory=list)

    def strokes_for(self, player_id: int) -> int:
        if self.stroke_recipient_id is not None and self.stroke_recipient_id == player_id:
            return self.strokes_given
        return 0

    def as_dict(self) -> dict:
        return {
            "strokes_given": self.strokes_given,
            "stroke_recipient_id": self.stroke_recipient_id,
            "stroke_holes": list(self.stroke_holes),
        }


def stroke_count(handicap_difference: int, divisor: int, cap: int) -> int:
    """One stroke per ``divisor`` full strokes of handicap gap, never more than ``cap``."""
    return min(abs(handicap_difference) // divisor, cap)


def hardest_holes(holes: list[CourseHole], count: int) -> list[int]:
    """Hole numbers of the ``count`` lowest stroke-index holes, hardest first."""
    ranked = sorted(holes, key=lambda hole: (hole.handicap, hole.hole_number))
    return [hole.hole_number for hole in ranked[:count]]


class StrokeAllocator:
    def __init__(self, divisor: int = DEFAULT_STROKE_DIVISOR, cap: int = DEFAULT_STROKE_CAP) -> None:
        if divisor < 1:
            raise ValueError(f"Stroke divisor must be at least 1, got {divisor}")
        if cap < 0:
            raise ValueError(f"Stroke cap cannot be negative, got {cap}")
        self.divisor = divisor
        self.cap = cap

    def compute(
        self,
        player1_id: int,
        player1_handicap: int,
        player2_id: int,
        player2_handicap: int,
        segment_holes: list[CourseHole],
    ) -> StrokeAllocation:
        difference = player1_handicap - player2_handicap
        strokes = min(stroke_count(difference, self.divisor, self.cap), len(segment_holes))
        if strokes == 0:
            return StrokeAllocation()
        recipient = player1_id if difference > 0 else player2_id
        return StrokeAllocation(
            strokes_given=strokes,
            stroke_recipient_id=recipient,
            stroke_holes=hardest_holes(segment_holes, strokes),
        )
