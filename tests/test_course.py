import pytest

from matchplay.course import (
    DEFAULT_COURSE_HOLES,
    course_holes_from_rows,
    normalize_segment,
    segment_for_hole,
    segment_holes,
)
from matchplay.errors import ValidationError


@pytest.mark.parametrize("label", ["7–12", "7-12", " 7 - 12 ", "7—12"])
def test_segment_labels_normalize(label):
    assert normalize_segment(label) == "7–12"


@pytest.mark.parametrize("label", ["", "1-9", "back nine", None])
def test_unknown_segment_rejected(label):
    with pytest.raises(ValidationError):
        normalize_segment(label)


@pytest.mark.parametrize("hole, segment", [(1, "1–6"), (6, "1–6"), (7, "7–12"), (13, "13–18"), (18, "13–18")])
def test_segment_for_hole(hole, segment):
    assert segment_for_hole(hole) == segment


@pytest.mark.parametrize("hole", [0, 19, -3])
def test_segment_for_hole_out_of_range(hole):
    with pytest.raises(ValidationError):
        segment_for_hole(hole)


def test_segment_holes_returns_six_in_order():
    holes = segment_holes("13-18", DEFAULT_COURSE_HOLES)

    assert [hole.hole_number for hole in holes] == [13, 14, 15, 16, 17, 18]
    assert holes[1].handicap == 2


def test_segment_holes_requires_every_hole():
    nine = [hole for hole in DEFAULT_COURSE_HOLES if hole.hole_number <= 9]

    with pytest.raises(ValidationError):
        segment_holes("7–12", nine)


def test_course_holes_from_rows_sorts_and_defaults_par():
    holes = course_holes_from_rows(
        [{"hole_number": "2", "handicap": 5}, {"hole_number": 1, "par": 3, "handicap": "11"}]
    )

    assert [(h.hole_number, h.par, h.handicap) for h in holes] == [(1, 3, 11), (2, 4, 5)]
