import pytest

from matchplay import course_sync
from matchplay.course_sync import course_holes_from_payload, import_course_holes
from matchplay.golf_api import GolfApiError


def _course(handicaps, tee_name="White"):
    return {
        "id": 12,
        "club_name": "Muskoka Bay Club",
        "tees": {
            "male": [{"tee_name": "Short", "holes": [{"par": 3, "handicap": 1}]}],
            "female": [
                {
                    "tee_name": tee_name,
                    "holes": [
                        {"hole_number": number, "par": 4, "handicap": handicap}
                        for number, handicap in enumerate(handicaps, 1)
                    ],
                }
            ],
        },
    }


def test_first_full_tee_is_used():
    tee_name, holes = course_holes_from_payload(_course(list(range(18, 0, -1))))

    assert tee_name == "White"
    assert [hole.handicap for hole in holes[:3]] == [18, 17, 16]


def test_missing_stroke_index_is_an_error():
    handicaps = list(range(1, 19))
    handicaps[4] = None

    with pytest.raises(GolfApiError, match="hole 5 has no stroke index"):
        course_holes_from_payload(_course(handicaps))


def test_repeated_stroke_index_is_an_error():
    handicaps = list(range(1, 19))
    handicaps[17] = 1

    with pytest.raises(GolfApiError, match="no repeats"):
        course_holes_from_payload(_course(handicaps))


def test_bad_course_is_not_stored(store, monkeypatch):
    monkeypatch.setattr(course_sync, "fetch_course", lambda course_id, api_key: _course([3] * 18))

    with pytest.raises(GolfApiError):
        import_course_holes(store, 12, "key", "Muskoka Bay Golf Club")
    assert store.fetch_course_holes("Muskoka Bay Golf Club") == []


def test_import_stores_holes(store, monkeypatch):
    monkeypatch.setattr(course_sync, "fetch_course", lambda course_id, api_key: _course(list(range(1, 19))))

    summary = import_course_holes(store, 12, "key", "Muskoka Bay Golf Club")

    assert summary["tee_name"] == "White"
    assert len(store.fetch_course_holes("Muskoka Bay Golf Club")) == 18
