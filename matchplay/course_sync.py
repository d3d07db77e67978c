import logging
from typing import Any

from matchplay.course import CourseHole
from matchplay.golf_api import GolfApiError, fetch_course

logger = logging.getLogger(__name__)


def _tee_holes(course: dict[str, Any]) -> tuple[str | None, list[dict]]:
    tees_payload = course.get("tees") or {}
    for gender in ("male", "female"):
        for tee in tees_payload.get(gender, []) or []:
            holes = tee.get("holes") or []
            if len(holes) >= 18:
                return tee.get("tee_name"), holes
    return None, []


def course_holes_from_payload(course: dict[str, Any]) -> tuple[str | None, list[CourseHole]]:
    """Stroke indexes of the first 18-hole tee; every hole must carry a distinct index 1-18."""
    tee_name, raw_holes = _tee_holes(course)
    holes: list[CourseHole] = []
    for idx, hole in enumerate(raw_holes[:18], 1):
        handicap = hole.get("handicap")
        if isinstance(handicap, bool) or not isinstance(handicap, int):
            raise GolfApiError(f"{tee_name} tees: hole {idx} has no stroke index")
        holes.append(
            CourseHole(
                hole_number=hole.get("hole_number") or idx,
                par=hole.get("par") or 4,
                handicap=handicap,
            )
        )
    if holes and sorted(hole.handicap for hole in holes) != list(range(1, 19)):
        raise GolfApiError(f"{tee_name} tees: stroke indexes are not 1-18 with no repeats")
    return tee_name, holes


def import_course_holes(store, course_id: int, api_key: str, course_name: str) -> dict:
    """Fetch a course's stroke indexes and store them under ``course_name``."""
    course = fetch_course(course_id, api_key)
    tee_name, holes = course_holes_from_payload(course)
    if not holes:
        raise GolfApiError(f"Course {course_id} has no 18-hole tee with hole data")
    store.replace_course_holes(course_name, holes)
    logger.info(
        "Imported %d holes for %s from course %s (%s tees)",
        len(holes),
        course_name,
        course_id,
        tee_name,
    )
    return {
        "course_id": course["id"],
        "course_name": course_name,
        "club_name": course.get("club_name"),
        "tee_name": tee_name,
        "holes": [hole.as_dict() for hole in holes],
    }
