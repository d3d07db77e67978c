import pytest

from matchplay.course import DEFAULT_COURSE_HOLES, CourseHole, segment_holes
from matchplay.strokes import StrokeAllocator, hardest_holes, stroke_count

FRONT = segment_holes("1–6", DEFAULT_COURSE_HOLES)
MIDDLE = segment_holes("7–12", DEFAULT_COURSE_HOLES)


def test_equal_handicaps_give_no_strokes():
    for handicap in range(0, 37):
        allocation = StrokeAllocator().compute(1, handicap, 2, handicap, FRONT)
        assert allocation.strokes_given == 0
        assert allocation.stroke_recipient_id is None
        assert allocation.stroke_holes == []


@pytest.mark.parametrize(
    "difference, expected",
    [(0, 0), (1, 0), (2, 0), (3, 1), (4, 1), (5, 1), (6, 2), (9, 3), (17, 5), (18, 6), (30, 6)],
)
def test_one_stroke_per_three_capped_at_six(difference, expected):
    assert stroke_count(difference, 3, 6) == expected
    allocation = StrokeAllocator().compute(1, 5 + difference, 2, 5, FRONT)
    assert allocation.strokes_given == expected


def test_allocation_holds_for_every_handicap_pair():
    allocator = StrokeAllocator()
    front_numbers = {hole.hole_number for hole in FRONT}
    for first in range(0, 40):
        for second in range(0, 40):
            allocation = allocator.compute(1, first, 2, second, FRONT)
            assert allocation.strokes_given == min(abs(first - second) // 3, 6)
            assert len(allocation.stroke_holes) == allocation.strokes_given
            assert len(set(allocation.stroke_holes)) == len(allocation.stroke_holes)
            assert set(allocation.stroke_holes) <= front_numbers
            if allocation.strokes_given:
                assert allocation.stroke_recipient_id == (1 if first > second else 2)
            else:
                assert allocation.stroke_recipient_id is None


def test_higher_handicap_receives_strokes_on_hardest_holes():
    allocation = StrokeAllocator().compute(14, 8, 13, 17, FRONT)

    assert allocation.strokes_given == 3
    assert allocation.stroke_recipient_id == 13
    assert allocation.stroke_holes == [5, 3, 1]


def test_middle_segment_ordering():
    allocation = StrokeAllocator().compute(1, 8, 2, 20, MIDDLE)

    assert allocation.stroke_recipient_id == 2
    assert allocation.stroke_holes == [8, 12, 9, 10]


def test_stroke_index_ties_break_by_hole_number():
    holes = [CourseHole(4, 4, 3), CourseHole(2, 4, 3), CourseHole(3, 4, 1), CourseHole(1, 4, 7)]

    assert hardest_holes(holes, 3) == [3, 2, 4]


def test_full_cap_covers_whole_segment():
    allocation = StrokeAllocator().compute(1, 36, 2, 0, FRONT)

    assert allocation.strokes_given == 6
    assert sorted(allocation.stroke_holes) == [1, 2, 3, 4, 5, 6]


def test_divisor_and_cap_are_configurable():
    allocation = StrokeAllocator(divisor=2, cap=3).compute(1, 9, 2, 0, FRONT)

    assert allocation.strokes_given == 3
    assert StrokeAllocator(divisor=2).compute(1, 9, 2, 0, FRONT).strokes_given == 4


@pytest.mark.parametrize("divisor, cap", [(0, 6), (-1, 6), (3, -1)])
def test_invalid_policy_rejected(divisor, cap):
    with pytest.raises(ValueError):
        StrokeAllocator(divisor=divisor, cap=cap)


def test_strokes_for_only_counts_recipient():
    allocation = StrokeAllocator().compute(1, 20, 2, 11, FRONT)

    assert allocation.strokes_for(1) == 3
    assert allocation.strokes_for(2) == 0
