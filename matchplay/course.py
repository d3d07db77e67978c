from dataclasses import dataclass

from matchplay.errors import ValidationError

SEGMENTS = ("1–6", "7–12", "13–18")
HOLES_PER_SEGMENT = 6
SEGMENT_RANGES = {
    "1–6": range(1, 7),
    "7–12": range(7, 13),
    "13–18": range(13, 19),
}


@dataclass(frozen=True)
class CourseHole:
    hole_number: int
    par: int
    handicap: int

    def as_dict(self) -> dict:
        return {"hole_number": self.hole_number, "par": self.par, "handicap": self.handicap}


# Muskoka Bay Golf Club, championship tees.
DEFAULT_COURSE_NAME = "Muskoka Bay Golf Club"
DEFAULT_COURSE_HOLES = [
    CourseHole(1, 4, 9),
    CourseHole(2, 3, 15),
    CourseHole(3, 4, 5),
    CourseHole(4, 4, 13),
    CourseHole(5, 5, 1),
    CourseHole(6, 3, 17),
    CourseHole(7, 4, 11),
    CourseHole(8, 5, 3),
    CourseHole(9, 4, 7),
    CourseHole(10, 4, 8),
    CourseHole(11, 3, 18),
    CourseHole(12, 5, 4),
    CourseHole(13, 4, 16),
    CourseHole(14, 5, 2),
    CourseHole(15, 4, 6),
    CourseHole(16, 4, 12),
    CourseHole(17, 3, 14),
    CourseHole(18, 4, 10),
]


def normalize_segment(label: str) -> str:
    """Accept "7–12", "7-12" or " 7 - 12 " and return the canonical en-dash label."""
    if not isinstance(label, str):
        raise ValidationError(f"Unknown hole segment: {label!r}")
    compact = label.strip().replace(" ", "").replace("-", "–").replace("—", "–")
    if compact not in SEGMENT_RANGES:
        raise ValidationError(f"Unknown hole segment: {label!r}")
    return compact


def segment_for_hole(hole: int) -> str:
    for segment, holes in SEGMENT_RANGES.items():
        if hole in holes:
            return segment
    raise ValidationError(f"Hole {hole} is outside holes 1-18")


def course_holes_from_rows(rows: list[dict]) -> list[CourseHole]:
    return sorted(
        (
            CourseHole(
                hole_number=int(row["hole_number"]),
                par=int(row.get("par") or 4),
                handicap=int(row["handicap"]),
            )
            for row in rows
        ),
        key=lambda hole: hole.hole_number,
    )


def segment_holes(segment: str, course_holes: list[CourseHole]) -> list[CourseHole]:
    segment = normalize_segment(segment)
    by_number = {hole.hole_number: hole for hole in course_holes}
    wanted = SEGMENT_RANGES[segment]
    missing = [number for number in wanted if number not in by_number]
    if missing:
        raise ValidationError(
            f"Course is missing holes {missing} for segment {segment}"
        )
    return [by_number[number] for number in wanted]
